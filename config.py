"""
Application Configuration
Loads environment variables and provides configuration classes for different environments
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


class Config:
    """Base configuration class"""

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    JSON_SORT_KEYS = False

    # Key-value store (backed by a single SQL table)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'tillsync.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Tenancy
    DEFAULT_TENANT_ID = os.environ.get('DEFAULT_TENANT_ID', 'tenant_default')
    TENANT_HEADER = os.environ.get('TENANT_HEADER', 'X-Tenant-ID')
    # When true, requests without a tenant header are rejected instead of
    # falling back to DEFAULT_TENANT_ID
    REQUIRE_TENANT_ID = os.environ.get('REQUIRE_TENANT_ID', 'False').lower() == 'true'

    # Sale rules
    DEFAULT_TAX_RATE = float(os.environ.get('DEFAULT_TAX_RATE', 0.15))
    MAX_ITEMS_PER_TRANSACTION = int(os.environ.get('MAX_ITEMS_PER_TRANSACTION', 100))
    MIN_PAYMENT_AMOUNT = float(os.environ.get('MIN_PAYMENT_AMOUNT', 0.01))
    DEFAULT_CASHIER = os.environ.get('DEFAULT_CASHIER', 'Unknown')
    DEFAULT_TERMINAL = os.environ.get('DEFAULT_TERMINAL', 'POS-001')

    # Stock Alerts
    LOW_STOCK_THRESHOLD = int(os.environ.get('LOW_STOCK_THRESHOLD', 10))

    # Daily targets are partitioned by date; deletes look back this many days
    TARGET_LOOKUP_DAYS = int(os.environ.get('TARGET_LOOKUP_DAYS', 7))

    # Projection reconciliation
    ENABLE_AUTO_RECONCILE = os.environ.get('ENABLE_AUTO_RECONCILE', 'False').lower() == 'true'
    RECONCILE_INTERVAL_MINUTES = int(os.environ.get('RECONCILE_INTERVAL_MINUTES', 30))

    # Logging
    LOG_FOLDER = os.path.join(basedir, 'logs')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Sentry Error Tracking (optional)
    SENTRY_DSN = os.environ.get('SENTRY_DSN', '')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SQLALCHEMY_ECHO = False  # Set to True to see SQL queries


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    # The default tenant is a migration aid, not an isolation boundary
    REQUIRE_TENANT_ID = os.environ.get('REQUIRE_TENANT_ID', 'True').lower() == 'true'


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    REQUIRE_TENANT_ID = False
    ENABLE_AUTO_RECONCILE = False


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
