"""
Shared pytest fixtures and configuration for all tests.

Provides the Flask application, a clean in-memory database per test, the
key-value store, and a seeded inventory laid out across all four projections.
"""

import pytest
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tillsync import create_app
from tillsync.models import db
from tillsync.kv_store import KVStore
from tillsync.utils import keys

TENANT = 'tenant_test'
OTHER_TENANT = 'tenant_other'


@pytest.fixture(scope='session')
def app_factory():
    """Factory fixture for creating test app instances."""
    def _create_app(config='testing', **overrides):
        app = create_app(config)
        app.config['TESTING'] = True
        app.config.update(overrides)
        return app
    return _create_app


@pytest.fixture(scope='function')
def fresh_app(app_factory):
    """Create a fresh application for each test with clean database."""
    app = app_factory()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(fresh_app):
    """Create a test client for each test."""
    return fresh_app.test_client()


@pytest.fixture(scope='function')
def store(fresh_app):
    """Key-value store bound to the test database."""
    return KVStore()


@pytest.fixture
def tenant_headers():
    """Request headers selecting the test tenant."""
    return {'X-Tenant-ID': TENANT}


def make_inventory(product_id, name, stock, price, min_stock=None, total_sold=0):
    """Matching records for one product in every projection."""
    catalog = {'id': product_id, 'name': name, 'price': price, 'stock': stock, 'category': 'General'}
    ledger = {
        'id': product_id, 'name': name, 'unit_price': price, 'current_stock': stock,
        'max_stock': 100, 'reorder_level': 20, 'total_sold': total_sold
    }
    operational = {
        'product_id': product_id, 'name': name, 'current_stock': stock,
        'reorder_level': 20, 'total_sold': total_sold
    }
    if min_stock is not None:
        catalog['min_stock'] = min_stock
        ledger['min_stock'] = min_stock
        operational['min_stock'] = min_stock
    return catalog, ledger, operational


def seed_projections(store, tenant_id, products):
    """Write the given products into all four projections of a tenant."""
    catalog, ledger, operational = [], [], []
    for product in products:
        catalog_record, ledger_record, operational_record = make_inventory(**product)
        catalog.append(catalog_record)
        ledger.append(ledger_record)
        operational.append(operational_record)

    store.set(keys.projection_key(tenant_id, keys.CATALOG), catalog)
    store.set(keys.projection_key(tenant_id, keys.GLOBAL_CATALOG), [dict(r) for r in catalog])
    store.set(keys.projection_key(tenant_id, keys.ITEM_LEDGER), ledger)
    store.set(keys.projection_key(tenant_id, keys.OPERATIONAL_VIEW), operational)


@pytest.fixture
def seed_inventory(store):
    """
    Seed the test tenant with:
    - P-COFFEE: stock 5, min_stock 2, price 10
    - P-MUFFIN: stock 1, price 4
    - P-WATER: stock 50, min_stock 10, price 2
    """
    products = [
        {'product_id': 'P-COFFEE', 'name': 'House Coffee', 'stock': 5, 'price': 10, 'min_stock': 2},
        {'product_id': 'P-MUFFIN', 'name': 'Blueberry Muffin', 'stock': 1, 'price': 4},
        {'product_id': 'P-WATER', 'name': 'Still Water', 'stock': 50, 'price': 2, 'min_stock': 10},
    ]
    seed_projections(store, TENANT, products)
    return products


def line(product_id, name, unit_price, quantity, **extra):
    """Build a basket line."""
    item = {'id': product_id, 'name': name, 'unit_price': unit_price, 'quantity': quantity}
    item.update(extra)
    return item


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "integration: tests that go through the HTTP layer")
