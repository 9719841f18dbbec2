"""
Storage Key Namespacing

Every key is prefixed with the tenant ID; tenant isolation is nothing more
than this prefix.
"""

TRANSACTION_PREFIX = 'transaction_'
DAILY_TRANSACTIONS_PREFIX = 'daily_transactions_'
DAILY_SALES_PREFIX = 'daily_sales_'
DAILY_TARGETS_PREFIX = 'daily_targets_'

# Inventory projections
CATALOG = 'cashier_products'
GLOBAL_CATALOG = 'products'
ITEM_LEDGER = 'inventory_items'
OPERATIONAL_VIEW = 'manager_inventory'
SYNCED_INVENTORY = 'synced_inventory'

PROJECTIONS = (CATALOG, GLOBAL_CATALOG, ITEM_LEDGER, OPERATIONAL_VIEW)


def _namespaced(tenant_id, name):
    if not tenant_id:
        raise ValueError('tenant_id is required to build a storage key')
    return f'{tenant_id}:{name}'


def transaction_key(tenant_id, transaction_id):
    return _namespaced(tenant_id, f'{TRANSACTION_PREFIX}{transaction_id}')


def daily_transactions_key(tenant_id, date):
    return _namespaced(tenant_id, f'{DAILY_TRANSACTIONS_PREFIX}{date}')


def daily_sales_key(tenant_id, date):
    return _namespaced(tenant_id, f'{DAILY_SALES_PREFIX}{date}')


def daily_targets_key(tenant_id, date):
    return _namespaced(tenant_id, f'{DAILY_TARGETS_PREFIX}{date}')


def projection_key(tenant_id, projection):
    """Key for one of the inventory projections or the synced snapshot"""
    if projection not in PROJECTIONS and projection != SYNCED_INVENTORY:
        raise ValueError(f'Unknown inventory projection: {projection}')
    return _namespaced(tenant_id, projection)
