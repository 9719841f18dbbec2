"""
Inventory Service
Creates, updates and deletes inventory items across the projections and
answers stock queries.

The item ledger is written first and is the authoritative write here; the
catalog, global catalog and operational view are mirrored best-effort, the
same way the stock ledger treats its secondary writes.
"""

import logging
from tillsync.constants import Messages
from tillsync.exceptions import ValidationError, PersistenceError, NotFoundError, SyncWarning
from tillsync.services.stock_ledger import is_low_stock, DEFAULT_LOW_STOCK_THRESHOLD
from tillsync.utils import keys
from tillsync.utils.helpers import generate_inventory_id, is_number, utc_now_iso

logger = logging.getLogger(__name__)

DEMO_INVENTORY = [
    {
        'id': 'INV-001',
        'name': 'Premium Coffee',
        'category': 'Beverages',
        'barcode': '7894561230123',
        'unit_price': 25.50,
        'min_stock': 10,
        'max_stock': 100,
        'current_stock': 45,
        'reorder_level': 20,
        'supplier': 'Coffee Suppliers Ltd',
        'description': 'Rich, aromatic premium coffee blend'
    },
    {
        'id': 'INV-002',
        'name': 'Artisan Sandwich',
        'category': 'Food',
        'barcode': '7894561230124',
        'unit_price': 45.90,
        'min_stock': 5,
        'max_stock': 50,
        'current_stock': 28,
        'reorder_level': 10,
        'supplier': 'Fresh Foods Co',
        'description': 'Fresh artisan sandwich with premium ingredients'
    },
    {
        'id': 'INV-003',
        'name': 'Spring Water',
        'category': 'Beverages',
        'barcode': '7894561230125',
        'unit_price': 8.50,
        'min_stock': 20,
        'max_stock': 200,
        'current_stock': 120,
        'reorder_level': 40,
        'supplier': 'Pure Water Systems',
        'description': 'Pure natural spring water'
    },
]


def _int_field(data, name, default):
    value = data.get(name)
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be a whole number', field=name)
    try:
        parsed = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'{name} must be a whole number', field=name)
    if parsed < 0:
        raise ValidationError(f'{name} must not be negative', field=name)
    return parsed


def _mirror(tenant_id, projection, write):
    """Best-effort projection write; failures are logged, never raised"""
    try:
        write()
    except Exception as e:
        warning = SyncWarning(projection, e)
        logger.warning(f"[tenant {tenant_id}] {warning.message}")
        return warning
    return None


def create_inventory_item(store, tenant_id, data, low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD):
    """
    Create an inventory item in every projection

    Args:
        store: KVStore
        tenant_id: Owning tenant
        data: name, unit_price and current_stock are required; category,
            barcode, min_stock, max_stock, reorder_level, supplier,
            description, is_active and id are optional

    Returns:
        dict: The item-ledger record

    Raises:
        ValidationError: Missing/invalid fields or a duplicate name/barcode
        PersistenceError: The item ledger write failed
    """
    name = (data.get('name') or '').strip()
    if not name or data.get('unit_price') is None or data.get('current_stock') is None:
        raise ValidationError(Messages.INVENTORY_FIELDS_REQUIRED)
    if not is_number(data['unit_price']) or data['unit_price'] < 0:
        raise ValidationError('unit_price must be a number of at least 0', field='unit_price')

    current_stock = _int_field(data, 'current_stock', 0)
    min_stock = _int_field(data, 'min_stock', low_stock_threshold)
    barcode = (data.get('barcode') or '').strip()
    now = utc_now_iso()

    ledger_key = keys.projection_key(tenant_id, keys.ITEM_LEDGER)
    ledger = store.get(ledger_key, [])
    for existing in ledger:
        if ((existing.get('name') or '').lower() == name.lower()
                or (barcode and existing.get('barcode') == barcode)
                or (data.get('id') and existing.get('id') == data['id'])):
            raise ValidationError(Messages.INVENTORY_DUPLICATE, field='name')

    item = {
        'id': data.get('id') or generate_inventory_id(),
        'name': name,
        'category': (data.get('category') or 'General').strip(),
        'barcode': barcode,
        'unit_price': data['unit_price'],
        'min_stock': min_stock,
        'max_stock': _int_field(data, 'max_stock', 100),
        'current_stock': current_stock,
        'reorder_level': _int_field(data, 'reorder_level', 20),
        'supplier': data.get('supplier') or '',
        'description': data.get('description') or '',
        'is_active': data.get('is_active') is not False,
        'tenant_id': tenant_id,
        'created_at': now,
        'last_updated': now[:10],
        'total_sold': 0,
        'low_stock_alert': is_low_stock(current_stock, min_stock, low_stock_threshold)
    }

    ledger.append(item)
    try:
        store.set(ledger_key, ledger)
    except Exception as e:
        logger.error(f"Error creating inventory item {item['id']}: {e}")
        raise PersistenceError(Messages.FAILED_TO_CREATE_ITEM) from e

    catalog_record = {
        'id': item['id'],
        'name': item['name'],
        'price': item['unit_price'],
        'barcode': item['barcode'],
        'category': item['category'],
        'stock': current_stock,
        'min_stock': min_stock,
        'tax_rate': data.get('tax_rate'),
        'is_active': item['is_active'],
        'last_updated': now,
        'low_stock_alert': item['low_stock_alert']
    }
    operational_record = {
        'product_id': item['id'],
        'name': item['name'],
        'current_stock': current_stock,
        'min_stock': min_stock,
        'reorder_level': item['reorder_level'],
        'total_sold': 0,
        'last_updated': now,
        'low_stock_alert': item['low_stock_alert']
    }

    def append_to(projection, record, match_field):
        def write():
            key = keys.projection_key(tenant_id, projection)
            records = store.get(key, [])
            if any(r.get(match_field) == record[match_field] for r in records):
                return
            records.append(dict(record))
            store.set(key, records)
        return write

    for projection, record, match_field in (
        (keys.CATALOG, catalog_record, 'id'),
        (keys.GLOBAL_CATALOG, catalog_record, 'id'),
        (keys.OPERATIONAL_VIEW, operational_record, 'product_id'),
    ):
        _mirror(tenant_id, projection, append_to(projection, record, match_field))

    logger.info(f"Created inventory item {item['id']} ({item['name']}) for tenant {tenant_id}")
    return item


# Ledger fields a caller may change; id, tenant and counters are kept
UPDATABLE_FIELDS = (
    'name', 'category', 'barcode', 'unit_price', 'current_stock', 'min_stock',
    'max_stock', 'reorder_level', 'supplier', 'description', 'is_active'
)


def _find_item(ledger, item_id):
    for index, item in enumerate(ledger):
        if item.get('id') == item_id:
            return index
    raise NotFoundError(Messages.INVENTORY_ITEM_NOT_FOUND, entity_id=item_id)


def _rewrite(store, tenant_id, projection, match_field, item_id, change):
    """Mirror step that applies change() to the matching record, if present"""
    def write():
        key = keys.projection_key(tenant_id, projection)
        records = store.get(key, [])
        for index, record in enumerate(records):
            if record.get(match_field) == item_id:
                break
        else:
            logger.debug(f"Item {item_id} not in {projection}, skipping")
            return
        updated = change(record)
        if updated is None:
            records.pop(index)
        else:
            records[index] = updated
        store.set(key, records)
    return write


def update_inventory_item(store, tenant_id, item_id, data, low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD):
    """
    Update an item-ledger record and push the change to the other projections

    Only the fields in UPDATABLE_FIELDS are applied; anything else in data is
    ignored. The low-stock flag is recomputed from the resulting stock.

    Returns:
        dict: The updated item-ledger record

    Raises:
        NotFoundError: No item with this id in the tenant's ledger
        ValidationError: Invalid field values or a name/barcode clash
        PersistenceError: The item ledger write failed
    """
    ledger_key = keys.projection_key(tenant_id, keys.ITEM_LEDGER)
    ledger = store.get(ledger_key, [])
    index = _find_item(ledger, item_id)
    item = ledger[index]

    changes = {field: data[field] for field in UPDATABLE_FIELDS if field in data}

    if 'name' in changes:
        if not isinstance(changes['name'], str) or not changes['name'].strip():
            raise ValidationError('name must not be empty', field='name')
        changes['name'] = changes['name'].strip()
    if 'barcode' in changes:
        changes['barcode'] = str(changes['barcode'] or '').strip()
    if 'unit_price' in changes:
        if not is_number(changes['unit_price']) or changes['unit_price'] < 0:
            raise ValidationError('unit_price must be a number of at least 0', field='unit_price')
    for field in ('current_stock', 'min_stock', 'max_stock', 'reorder_level'):
        if field in changes:
            changes[field] = _int_field(changes, field, item.get(field))
    if 'is_active' in changes:
        changes['is_active'] = changes['is_active'] is not False

    for index_other, existing in enumerate(ledger):
        if index_other == index:
            continue
        if (('name' in changes and (existing.get('name') or '').lower() == changes['name'].lower())
                or (changes.get('barcode') and existing.get('barcode') == changes['barcode'])):
            raise ValidationError(Messages.INVENTORY_DUPLICATE, field='name')

    now = utc_now_iso()
    item.update(changes)
    item['last_updated'] = now[:10]
    item['low_stock_alert'] = is_low_stock(
        item.get('current_stock') or 0, item.get('min_stock'), low_stock_threshold
    )

    try:
        store.set(ledger_key, ledger)
    except Exception as e:
        logger.error(f"Error updating inventory item {item_id}: {e}")
        raise PersistenceError(Messages.FAILED_TO_UPDATE_ITEM) from e

    def catalog_change(record):
        record.update({
            'name': item['name'],
            'price': item.get('unit_price', record.get('price')),
            'barcode': item.get('barcode'),
            'category': item.get('category'),
            'stock': item['current_stock'],
            'min_stock': item.get('min_stock'),
            'is_active': item.get('is_active', True),
            'last_updated': now,
            'low_stock_alert': item['low_stock_alert']
        })
        return record

    def operational_change(record):
        record.update({
            'name': item['name'],
            'current_stock': item['current_stock'],
            'min_stock': item.get('min_stock'),
            'reorder_level': item.get('reorder_level'),
            'last_updated': now,
            'low_stock_alert': item['low_stock_alert']
        })
        return record

    for projection, match_field, change in (
        (keys.CATALOG, 'id', catalog_change),
        (keys.GLOBAL_CATALOG, 'id', catalog_change),
        (keys.OPERATIONAL_VIEW, 'product_id', operational_change),
    ):
        write = _rewrite(store, tenant_id, projection, match_field, item_id, change)
        _mirror(tenant_id, projection, write)

    logger.info(f"Updated inventory item {item_id} for tenant {tenant_id}")
    return item


def delete_inventory_item(store, tenant_id, item_id):
    """
    Remove an item from the item ledger, then from the other projections

    Returns:
        dict: The removed item-ledger record

    Raises:
        NotFoundError: No item with this id in the tenant's ledger
        PersistenceError: The item ledger write failed
    """
    ledger_key = keys.projection_key(tenant_id, keys.ITEM_LEDGER)
    ledger = store.get(ledger_key, [])
    removed = ledger.pop(_find_item(ledger, item_id))

    try:
        store.set(ledger_key, ledger)
    except Exception as e:
        logger.error(f"Error deleting inventory item {item_id}: {e}")
        raise PersistenceError(Messages.FAILED_TO_DELETE_ITEM) from e

    for projection, match_field in (
        (keys.CATALOG, 'id'),
        (keys.GLOBAL_CATALOG, 'id'),
        (keys.OPERATIONAL_VIEW, 'product_id'),
    ):
        remove = _rewrite(store, tenant_id, projection, match_field, item_id, lambda record: None)
        _mirror(tenant_id, projection, remove)

    logger.info(f"Deleted inventory item {item_id} for tenant {tenant_id}")
    return removed


def list_inventory(store, tenant_id):
    """Item-ledger records for a tenant"""
    return store.get(keys.projection_key(tenant_id, keys.ITEM_LEDGER), [])


def list_low_stock(store, tenant_id, low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD):
    """Item-ledger records at or below their minimum stock"""
    return [
        item for item in list_inventory(store, tenant_id)
        if is_low_stock(item.get('current_stock') or 0, item.get('min_stock'), low_stock_threshold)
    ]


def seed_demo_inventory(store, tenant_id, low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD):
    """
    Seed the demo items for a tenant with an empty item ledger

    Returns:
        int: Number of items created
    """
    if list_inventory(store, tenant_id):
        logger.info(f"Tenant {tenant_id} already has inventory, skipping demo seed")
        return 0

    for demo_item in DEMO_INVENTORY:
        create_inventory_item(store, tenant_id, demo_item, low_stock_threshold=low_stock_threshold)
    return len(DEMO_INVENTORY)
