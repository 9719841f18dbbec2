"""
Unit Tests for the Stock Ledger

Tests cover:
- Availability check against the primary catalog
- Whole-basket rejection with per-line errors and no writes
- Decrement across all four projections
- Best-effort mirrors: a secondary failure is a warning, a primary failure aborts
- Item-ledger record creation on first sale
"""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import SQLAlchemyError

from conftest import TENANT, OTHER_TENANT, line
from tillsync.constants import Messages
from tillsync.exceptions import StockError, PersistenceError, SyncWarning
from tillsync.kv_store import KVStore
from tillsync.services.stock_ledger import StockLedger, is_low_stock
from tillsync.utils import keys

pytestmark = pytest.mark.unit


def projection(store, name, tenant_id=TENANT):
    return store.get(keys.projection_key(tenant_id, name), [])


def by_id(records, product_id, id_field='id'):
    return next(r for r in records if r.get(id_field) == product_id)


def failing_set_for(projection_name):
    """KVStore.set replacement that fails for one projection key"""
    original_set = KVStore.set

    def _set(self, key, value):
        if key.endswith(f':{projection_name}'):
            raise SQLAlchemyError(f'{projection_name} unavailable')
        return original_set(self, key, value)
    return _set


# ============================================================================
# Test: low-stock flag
# ============================================================================

class TestIsLowStock:
    """Tests for the low-stock rule"""

    def test_uses_min_stock(self):
        assert is_low_stock(2, min_stock=2) is True
        assert is_low_stock(3, min_stock=2) is False

    def test_falls_back_to_threshold(self):
        assert is_low_stock(10, threshold=10) is True
        assert is_low_stock(11, threshold=10) is False


# ============================================================================
# Test: check phase
# ============================================================================

class TestCheckAvailability:
    """Tests for the check phase"""

    def test_plan_for_available_lines(self, store, seed_inventory):
        ledger = StockLedger(store, TENANT)
        check = ledger.check_availability([line('P-COFFEE', 'House Coffee', 10, 2)])

        assert check.is_available
        assert len(check.updates) == 1
        update = check.updates[0]
        assert update.quantity_to_reduce == 2
        assert update.new_stock == 3
        assert update.record['id'] == 'P-COFFEE'

    def test_collects_every_failing_line(self, store, seed_inventory):
        ledger = StockLedger(store, TENANT)
        check = ledger.check_availability([
            line('P-MUFFIN', 'Blueberry Muffin', 4, 2),
            line('P-WATER', 'Still Water', 2, 1),
            line('P-GHOST', 'Ghost Item', 1, 1),
        ])

        assert not check.is_available
        assert len(check.errors) == 2

        short = check.errors[0]
        assert short['product_id'] == 'P-MUFFIN'
        assert short['requested_quantity'] == 2
        assert short['available_stock'] == 1
        assert short['shortfall'] == 1
        assert short['error'] == Messages.INSUFFICIENT_STOCK

        missing = check.errors[1]
        assert missing['product_id'] == 'P-GHOST'
        assert missing['available_stock'] == 0
        assert missing['error'] == Messages.PRODUCT_NOT_FOUND

    def test_repeated_product_uses_running_balance(self, store, seed_inventory):
        ledger = StockLedger(store, TENANT)
        check = ledger.check_availability([
            line('P-COFFEE', 'House Coffee', 10, 3),
            line('P-COFFEE', 'House Coffee', 10, 3),
        ])

        assert not check.is_available
        assert check.errors[0]['available_stock'] == 2
        assert check.errors[0]['shortfall'] == 1

    def test_other_tenant_sees_no_products(self, store, seed_inventory):
        check = StockLedger(store, OTHER_TENANT).check_availability([line('P-COFFEE', 'House Coffee', 10, 1)])
        assert check.errors[0]['error'] == Messages.PRODUCT_NOT_FOUND


# ============================================================================
# Test: process (check + apply)
# ============================================================================

class TestProcess:
    """Tests for the full check-then-apply cycle"""

    def test_rejection_writes_nothing(self, store, seed_inventory):
        before = {name: projection(store, name) for name in keys.PROJECTIONS}

        with pytest.raises(StockError) as exc_info:
            StockLedger(store, TENANT).process([
                line('P-WATER', 'Still Water', 2, 1),
                line('P-MUFFIN', 'Blueberry Muffin', 4, 2),
            ])

        assert exc_info.value.errors[0]['available_stock'] == 1
        assert exc_info.value.to_dict()['stock_errors'] == exc_info.value.errors
        for name in keys.PROJECTIONS:
            assert projection(store, name) == before[name]

    def test_decrements_every_projection(self, store, seed_inventory):
        result = StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 2)])

        assert result.warnings == []
        assert by_id(projection(store, keys.CATALOG), 'P-COFFEE')['stock'] == 3
        assert by_id(projection(store, keys.GLOBAL_CATALOG), 'P-COFFEE')['stock'] == 3

        ledger_record = by_id(projection(store, keys.ITEM_LEDGER), 'P-COFFEE')
        assert ledger_record['current_stock'] == 3
        assert ledger_record['total_sold'] == 2
        assert 'last_sale' in ledger_record

        operational = by_id(projection(store, keys.OPERATIONAL_VIEW), 'P-COFFEE', id_field='product_id')
        assert operational['current_stock'] == 3
        assert operational['total_sold'] == 2

    def test_untouched_products_unchanged(self, store, seed_inventory):
        StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 1)])
        assert by_id(projection(store, keys.CATALOG), 'P-WATER')['stock'] == 50

    def test_low_stock_flag_flips(self, store, seed_inventory):
        StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 2)])
        assert by_id(projection(store, keys.CATALOG), 'P-COFFEE')['low_stock_alert'] is False

        StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 1)])
        assert by_id(projection(store, keys.CATALOG), 'P-COFFEE')['low_stock_alert'] is True

    def test_sell_to_zero(self, store, seed_inventory):
        StockLedger(store, TENANT).process([line('P-MUFFIN', 'Blueberry Muffin', 4, 1)])
        assert by_id(projection(store, keys.CATALOG), 'P-MUFFIN')['stock'] == 0

    def test_mirrors_clamp_at_zero(self, store, seed_inventory):
        operational = projection(store, keys.OPERATIONAL_VIEW)
        by_id(operational, 'P-WATER', id_field='product_id')['current_stock'] = 1
        store.set(keys.projection_key(TENANT, keys.OPERATIONAL_VIEW), operational)

        StockLedger(store, TENANT).process([line('P-WATER', 'Still Water', 2, 5)])

        record = by_id(projection(store, keys.OPERATIONAL_VIEW), 'P-WATER', id_field='product_id')
        assert record['current_stock'] == 0
        assert by_id(projection(store, keys.CATALOG), 'P-WATER')['stock'] == 45

    def test_creates_missing_ledger_record(self, store, seed_inventory):
        ledger = [r for r in projection(store, keys.ITEM_LEDGER) if r['id'] != 'P-WATER']
        store.set(keys.projection_key(TENANT, keys.ITEM_LEDGER), ledger)

        StockLedger(store, TENANT, low_stock_threshold=10).process([line('P-WATER', 'Still Water', 2, 4)])

        record = by_id(projection(store, keys.ITEM_LEDGER), 'P-WATER')
        assert record['current_stock'] == 46
        assert record['total_sold'] == 4
        assert record['min_stock'] == 10
        assert record['max_stock'] == 100
        assert record['reorder_level'] == 20

    def test_product_missing_from_global_catalog_is_skipped(self, store, seed_inventory):
        store.set(keys.projection_key(TENANT, keys.GLOBAL_CATALOG), [])
        result = StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 1)])

        assert result.warnings == []
        assert projection(store, keys.GLOBAL_CATALOG) == []


# ============================================================================
# Test: failure handling
# ============================================================================

class TestFailures:
    """Primary write failure aborts; mirror failures only warn"""

    def test_primary_failure_raises_persistence_error(self, store, seed_inventory):
        with patch.object(KVStore, 'set', new=failing_set_for(keys.CATALOG)):
            with pytest.raises(PersistenceError) as exc_info:
                StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 1)])

        assert exc_info.value.message == Messages.FAILED_TO_UPDATE_STOCK
        assert exc_info.value.to_dict()['retry'] is True
        # mirrors are not attempted once the primary write fails
        assert by_id(projection(store, keys.ITEM_LEDGER), 'P-COFFEE')['current_stock'] == 5

    @pytest.mark.parametrize('failing', [keys.GLOBAL_CATALOG, keys.ITEM_LEDGER, keys.OPERATIONAL_VIEW])
    def test_secondary_failure_is_warning(self, store, seed_inventory, failing):
        with patch.object(KVStore, 'set', new=failing_set_for(failing)):
            result = StockLedger(store, TENANT).process([line('P-COFFEE', 'House Coffee', 10, 1)])

        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert isinstance(warning, SyncWarning)
        assert warning.projection == failing

        assert by_id(projection(store, keys.CATALOG), 'P-COFFEE')['stock'] == 4
        for name in set(keys.PROJECTIONS) - {keys.CATALOG, failing}:
            records = projection(store, name)
            id_field = 'product_id' if name == keys.OPERATIONAL_VIEW else 'id'
            record = by_id(records, 'P-COFFEE', id_field=id_field)
            assert record.get('stock', record.get('current_stock')) == 4
