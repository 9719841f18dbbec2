"""
Flask Application Factory
Initializes and configures the Flask application
"""

import os
import logging
import time
from flask import Flask, g, jsonify, request
from flask_migrate import Migrate
from config import config
from tillsync.models import db
from tillsync.exceptions import TillsyncError

# Initialize extensions
migrate = Migrate()

request_logger = logging.getLogger('tillsync.requests')


def create_app(config_name='default'):
    """
    Application factory pattern
    Creates and configures Flask application
    """
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Validate secret key in production
    if config_name == 'production':
        if not app.config.get('SECRET_KEY') or app.config['SECRET_KEY'] == 'dev-secret-key-change-in-production':
            raise ValueError("Production requires a secure SECRET_KEY. Set it via environment variable.")

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize Sentry if configured
    if app.config.get('SENTRY_DSN'):
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=config_name
        )
        app.logger.info("Sentry error tracking initialized")

    if not app.config.get('TESTING'):
        os.makedirs(app.config['LOG_FOLDER'], exist_ok=True)

    # Register blueprints
    from tillsync.routes.transactions import bp as transactions_bp
    app.register_blueprint(transactions_bp, url_prefix='/transactions')

    from tillsync.routes.targets import bp as targets_bp
    app.register_blueprint(targets_bp, url_prefix='/targets')

    from tillsync.routes.inventory import bp as inventory_bp
    app.register_blueprint(inventory_bp, url_prefix='/inventory')

    @app.route('/health')
    def health():
        """Liveness check"""
        from tillsync.utils.helpers import utc_now_iso
        return jsonify({
            'success': True,
            'status': 'healthy',
            'service': 'tillsync',
            'timestamp': utc_now_iso()
        })

    # Error handlers
    @app.errorhandler(TillsyncError)
    def handle_domain_error(error):
        if error.status_code >= 500:
            from tillsync.utils.error_logger import log_error
            log_error(error, status_code=error.status_code)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'success': False, 'error': 'Route not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        from tillsync.constants import Messages
        from tillsync.utils.error_logger import log_error
        db.session.rollback()
        log_error(getattr(error, 'original_exception', None) or error)
        return jsonify({'success': False, 'error': Messages.INTERNAL_ERROR}), 500

    # Request hooks
    @app.before_request
    def before_request():
        """Resolve the tenant and start the request timer"""
        from tillsync.utils.tenant_context import set_tenant_context
        g.request_started = time.perf_counter()
        set_tenant_context()

    @app.after_request
    def after_request(response):
        """Log the request and add security headers"""
        started = getattr(g, 'request_started', None)
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            request_logger.info(f"{request.method} {request.path} - {response.status_code} - {elapsed_ms:.0f}ms")

        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # Prevent clickjacking
        response.headers['X-Frame-Options'] = 'DENY'

        # Referrer policy
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        return response

    return app
