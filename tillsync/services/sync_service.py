"""
Sync Service
Reconciles the four inventory projections of each tenant.

The commit path writes the primary catalog first and mirrors the rest
best-effort, so the projections can drift apart. This service reports that
drift and writes a merged, read-only snapshot to the synced_inventory key.
It never writes to the projections themselves.

known_tenants() lists catalog keys with a SQL LIKE over the kv_store table.
That is a shortcut of the SQLAlchemy-backed store; the sale path itself only
ever reads and writes single keys.
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from tillsync.kv_store import KVStore
from tillsync.models import KVEntry
from tillsync.constants import Messages
from tillsync.exceptions import PersistenceError
from tillsync.services.stock_ledger import is_low_stock
from tillsync.utils import keys
from tillsync.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)


def _find(records, product_id, name, id_field='id'):
    """Match a projection record by product ID, falling back to name"""
    for record in records:
        if record.get(id_field) == product_id:
            return record
    for record in records:
        if name and record.get('name') == name:
            return record
    return None


class InventorySyncService:
    """Service for reconciling inventory projections"""

    def __init__(self, app, store=None):
        self.app = app
        self.store = store
        self.scheduler = None

    def _store(self):
        return self.store or KVStore()

    def _load(self, tenant_id):
        store = self._store()
        return {
            projection: store.get(keys.projection_key(tenant_id, projection), [])
            for projection in keys.PROJECTIONS
        }

    def known_tenants(self):
        """Tenants that have a primary catalog, plus the default tenant"""
        suffix = f':{keys.CATALOG}'
        entries = KVEntry.query.filter(KVEntry.key.like(f'%{suffix}')).all()
        # LIKE treats '_' as a wildcard, so re-check the suffix exactly
        tenants = {entry.key[:-len(suffix)] for entry in entries if entry.key.endswith(suffix)}
        tenants.add(self.app.config.get('DEFAULT_TENANT_ID', 'tenant_default'))
        return sorted(tenants)

    def build_report(self, tenant_id):
        """
        Compare stock levels across projections, product by product

        Every product known to any projection appears once. A projection
        with no record for the product reports None.

        Returns:
            list: dicts with product_id, name, catalog_stock, global_stock,
                ledger_stock, operational_stock and in_sync
        """
        data = self._load(tenant_id)
        catalog = data[keys.CATALOG]
        global_catalog = data[keys.GLOBAL_CATALOG]
        ledger = data[keys.ITEM_LEDGER]
        operational = data[keys.OPERATIONAL_VIEW]

        products = []
        seen = set()
        for record in catalog + global_catalog + ledger:
            if record.get('id') and record['id'] not in seen:
                seen.add(record['id'])
                products.append((record['id'], record.get('name')))
        for record in operational:
            product_id = record.get('product_id')
            if product_id and product_id not in seen:
                seen.add(product_id)
                products.append((product_id, record.get('name')))

        report = []
        for product_id, name in products:
            catalog_record = _find(catalog, product_id, None)
            global_record = _find(global_catalog, product_id, None)
            ledger_record = _find(ledger, product_id, name)
            operational_record = _find(operational, product_id, name, id_field='product_id')

            entry = {
                'product_id': product_id,
                'name': name,
                'catalog_stock': catalog_record.get('stock') if catalog_record else None,
                'global_stock': global_record.get('stock') if global_record else None,
                'ledger_stock': ledger_record.get('current_stock') if ledger_record else None,
                'operational_stock': operational_record.get('current_stock') if operational_record else None
            }
            entry['in_sync'] = len({
                entry['catalog_stock'], entry['global_stock'],
                entry['ledger_stock'], entry['operational_stock']
            }) == 1
            report.append(entry)

        return report

    def build_snapshot(self, tenant_id):
        """
        Merge each catalog product with its ledger and operational records

        The primary catalog is authoritative for stock; the other projections
        contribute their counters and reorder settings.
        """
        data = self._load(tenant_id)
        threshold = self.app.config.get('LOW_STOCK_THRESHOLD', 10)
        now = utc_now_iso()

        items = []
        for product in data[keys.CATALOG]:
            ledger_record = _find(data[keys.ITEM_LEDGER], product.get('id'), product.get('name')) or {}
            operational_record = _find(
                data[keys.OPERATIONAL_VIEW], product.get('id'), product.get('name'), id_field='product_id'
            ) or {}

            stock = product.get('stock') or 0
            min_stock = product.get('min_stock', ledger_record.get('min_stock'))
            items.append({
                'id': product.get('id'),
                'name': product.get('name'),
                'category': product.get('category') or ledger_record.get('category'),
                'barcode': product.get('barcode') or ledger_record.get('barcode'),
                'unit_price': product.get('price', ledger_record.get('unit_price')),
                'current_stock': stock,
                'min_stock': min_stock,
                'max_stock': ledger_record.get('max_stock'),
                'reorder_level': ledger_record.get('reorder_level', operational_record.get('reorder_level')),
                'total_sold': max(ledger_record.get('total_sold') or 0,
                                  operational_record.get('total_sold') or 0),
                'is_active': product.get('is_active', True),
                'low_stock_alert': is_low_stock(stock, min_stock, threshold),
                'last_updated': now
            })

        return {
            'tenant_id': tenant_id,
            'items': items,
            'synced_items': len(items),
            'total_stock': sum(item['current_stock'] for item in items),
            'low_stock_items': sum(1 for item in items if item['low_stock_alert']),
            'last_sync': now
        }

    def reconcile(self, tenant_id):
        """
        Build the drift report and store the merged snapshot

        Returns:
            dict: snapshot summary plus the drift report

        Raises:
            PersistenceError: The snapshot could not be written
        """
        snapshot = self.build_snapshot(tenant_id)
        report = self.build_report(tenant_id)
        drifted = [entry for entry in report if not entry['in_sync']]

        try:
            self._store().set(keys.projection_key(tenant_id, keys.SYNCED_INVENTORY), snapshot)
        except Exception as e:
            logger.error(f"Error writing synced inventory for tenant {tenant_id}: {e}")
            raise PersistenceError(Messages.FAILED_TO_RECONCILE) from e

        if drifted:
            logger.warning(f"Tenant {tenant_id}: {len(drifted)} product(s) out of sync "
                           f"({', '.join(str(entry['product_id']) for entry in drifted)})")
        logger.info(f"Reconciled {snapshot['synced_items']} item(s) for tenant {tenant_id}")

        return {
            'synced_items': snapshot['synced_items'],
            'total_stock': snapshot['total_stock'],
            'low_stock_items': snapshot['low_stock_items'],
            'last_sync': snapshot['last_sync'],
            'drifted_items': len(drifted),
            'report': report
        }

    def reconcile_all(self):
        """Reconcile every known tenant; one tenant's failure does not stop the rest"""
        with self.app.app_context():
            tenants = self.known_tenants()
            reconciled = 0
            for tenant_id in tenants:
                try:
                    self.reconcile(tenant_id)
                    reconciled += 1
                except Exception as e:
                    logger.error(f"Error reconciling tenant {tenant_id}: {e}")

            logger.info(f"Reconciliation completed: {reconciled}/{len(tenants)} tenant(s)")
            return reconciled

    def get_sync_status(self, tenant_id):
        """Last snapshot summary and current drift for a tenant"""
        snapshot = self._store().get(keys.projection_key(tenant_id, keys.SYNCED_INVENTORY))
        report = self.build_report(tenant_id)

        return {
            'last_sync': snapshot.get('last_sync') if snapshot else None,
            'synced_items': snapshot.get('synced_items', 0) if snapshot else 0,
            'total_products': len(report),
            'drifted_items': sum(1 for entry in report if not entry['in_sync']),
            'in_sync': all(entry['in_sync'] for entry in report),
            'auto_reconcile_enabled': self.app.config.get('ENABLE_AUTO_RECONCILE', False)
        }

    def start_scheduler(self):
        """Start background scheduler for automatic reconciliation"""
        if self.scheduler:
            logger.warning("Reconcile scheduler already running")
            return

        if not self.app.config.get('ENABLE_AUTO_RECONCILE'):
            logger.info("Auto reconcile is disabled, not starting scheduler")
            return

        self.scheduler = BackgroundScheduler()

        interval = self.app.config.get('RECONCILE_INTERVAL_MINUTES', 30)

        self.scheduler.add_job(
            func=self.reconcile_all,
            trigger='interval',
            minutes=interval,
            id='reconcile_inventory'
        )

        self.scheduler.start()
        logger.info(f"Reconcile scheduler started. Will reconcile every {interval} minutes")

    def stop_scheduler(self):
        """Stop the scheduler"""
        if self.scheduler:
            self.scheduler.shutdown()
            self.scheduler = None
            logger.info("Reconcile scheduler stopped")
