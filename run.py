"""
Application Entry Point
Initializes and runs the Flask application with background services
"""

import os
import logging
import click
from tillsync import create_app, db
from tillsync.kv_store import KVStore
from tillsync.services.inventory_service import seed_demo_inventory
from tillsync.services.sync_service import InventorySyncService

# Determine configuration environment
config_name = os.environ.get('FLASK_ENV', 'development')
app = create_app(config_name)

# Setup logging
if not os.path.exists(app.config['LOG_FOLDER']):
    os.makedirs(app.config['LOG_FOLDER'])

logging.basicConfig(
    level=getattr(logging, app.config['LOG_LEVEL']),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(os.path.join(app.config['LOG_FOLDER'], 'tillsync.log')),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@app.shell_context_processor
def make_shell_context():
    """Make database and store available in Flask shell"""
    from tillsync import models
    return {
        'db': db,
        'KVEntry': models.KVEntry,
        'ErrorLog': models.ErrorLog,
        'store': KVStore()
    }


@app.cli.command()
def init_db():
    """Create the key-value and error-log tables"""
    logger.info("Initializing database...")
    db.create_all()
    logger.info("Database initialized successfully!")


@app.cli.command()
@click.option('--tenant', default=None, help='Tenant to seed (defaults to DEFAULT_TENANT_ID)')
def seed_demo(tenant):
    """Seed demo inventory into every projection"""
    tenant_id = tenant or app.config['DEFAULT_TENANT_ID']
    logger.info(f"Seeding demo inventory for tenant {tenant_id}...")
    created = seed_demo_inventory(KVStore(), tenant_id,
                                  low_stock_threshold=app.config['LOW_STOCK_THRESHOLD'])
    logger.info(f"Seeded {created} item(s)")


@app.cli.command()
@click.option('--tenant', default=None, help='Reconcile a single tenant instead of all known tenants')
def reconcile_inventory(tenant):
    """Rebuild the synced inventory snapshot and report drift"""
    sync_service = InventorySyncService(app)
    if tenant:
        result = sync_service.reconcile(tenant)
        logger.info(f"Tenant {tenant}: {result['synced_items']} item(s), "
                    f"{result['drifted_items']} out of sync")
    else:
        sync_service.reconcile_all()
    logger.info("Reconciliation completed!")


def start_background_services():
    """Start the reconcile scheduler"""
    logger.info("Starting background services...")

    sync_service = InventorySyncService(app)
    if app.config['ENABLE_AUTO_RECONCILE']:
        sync_service.start_scheduler()
        logger.info("Reconcile service started")
    return sync_service


if __name__ == '__main__':
    # Check if running in development mode
    is_dev = os.environ.get('FLASK_ENV', 'development') == 'development'
    use_reloader = os.environ.get('FLASK_USE_RELOADER', 'true').lower() == 'true'

    with app.app_context():
        # Create tables if they don't exist
        db.create_all()
        logger.info("Database tables created")

        # Start background services (only if not using reloader to avoid duplicate services)
        if not use_reloader or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
            start_background_services()

    logger.info("Starting tillsync...")
    logger.info(f"Debug mode: {is_dev}, Auto-reload: {use_reloader}")

    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5001)),
        debug=is_dev,
        use_reloader=use_reloader
    )
