"""
Unit Tests for Identifier Generation, Date Helpers and Storage Keys

Tests cover:
- Transaction, receipt, inventory and target ID formats
- Calendar date validation
- Recent-date windows
- Tenant-prefixed storage keys
"""

import re
import pytest

from tillsync.utils import keys
from tillsync.utils.helpers import (
    generate_transaction_id, generate_receipt_number, generate_inventory_id,
    generate_target_id, is_valid_date, recent_dates, is_number, utc_now_iso
)

pytestmark = pytest.mark.unit


# ============================================================================
# Test: identifier generation
# ============================================================================

class TestIdentifiers:
    """Tests for generated IDs"""

    def test_transaction_id_format(self):
        """TXN-<millis>-<4 digits>"""
        assert re.fullmatch(r'TXN-\d{13}-\d{4}', generate_transaction_id())

    def test_receipt_number_format(self):
        """RCP-YYYYMMDD-HHMMSS-<3 digits>"""
        assert re.fullmatch(r'RCP-\d{8}-\d{6}-\d{3}', generate_receipt_number())

    def test_inventory_id_format(self):
        assert re.fullmatch(r'INV-\d{13}-\d{4}', generate_inventory_id())

    def test_target_id_format(self):
        """target_<millis>_<9 base36 chars>"""
        assert re.fullmatch(r'target_\d{13}_[a-z0-9]{9}', generate_target_id())

    def test_transaction_ids_differ(self):
        ids = {generate_transaction_id() for _ in range(50)}
        assert len(ids) > 1

    def test_utc_now_iso_has_z_suffix(self):
        assert utc_now_iso().endswith('Z')


# ============================================================================
# Test: date helpers
# ============================================================================

class TestDates:
    """Tests for date validation and windows"""

    @pytest.mark.parametrize('value', ['2024-01-31', '2024-02-29', '1999-12-01'])
    def test_valid_dates(self, value):
        assert is_valid_date(value) is True

    @pytest.mark.parametrize('value', [
        '2024-02-30', '2023-02-29', '2024-13-01', '2024-1-1', '24-01-01',
        '2024/01/01', '', None, 20240101
    ])
    def test_invalid_dates(self, value):
        assert is_valid_date(value) is False

    def test_recent_dates_newest_first(self):
        assert recent_dates(3, today='2024-03-01') == ['2024-03-01', '2024-02-29', '2024-02-28']

    def test_recent_dates_length(self):
        assert len(recent_dates(7)) == 7


class TestIsNumber:
    """Tests for is_number"""

    def test_ints_and_floats(self):
        assert is_number(1) and is_number(0.5) and is_number(0)

    def test_booleans_are_not_numbers(self):
        assert not is_number(True)

    def test_strings_are_not_numbers(self):
        assert not is_number('10')

    @pytest.mark.parametrize('value', [float('nan'), float('inf'), float('-inf')])
    def test_non_finite_floats_are_not_numbers(self, value):
        assert not is_number(value)

    def test_large_ints_are_numbers(self):
        assert is_number(10 ** 400)


# ============================================================================
# Test: storage keys
# ============================================================================

class TestKeys:
    """Tests for tenant-prefixed storage keys"""

    def test_transaction_key(self):
        assert keys.transaction_key('t1', 'TXN-1') == 't1:transaction_TXN-1'

    def test_daily_keys(self):
        assert keys.daily_transactions_key('t1', '2024-01-01') == 't1:daily_transactions_2024-01-01'
        assert keys.daily_sales_key('t1', '2024-01-01') == 't1:daily_sales_2024-01-01'
        assert keys.daily_targets_key('t1', '2024-01-01') == 't1:daily_targets_2024-01-01'

    def test_projection_keys(self):
        assert keys.projection_key('t1', keys.CATALOG) == 't1:cashier_products'
        assert keys.projection_key('t1', keys.GLOBAL_CATALOG) == 't1:products'
        assert keys.projection_key('t1', keys.ITEM_LEDGER) == 't1:inventory_items'
        assert keys.projection_key('t1', keys.OPERATIONAL_VIEW) == 't1:manager_inventory'
        assert keys.projection_key('t1', keys.SYNCED_INVENTORY) == 't1:synced_inventory'

    def test_unknown_projection_rejected(self):
        with pytest.raises(ValueError):
            keys.projection_key('t1', 'orders')

    @pytest.mark.parametrize('tenant_id', ['', None])
    def test_empty_tenant_rejected(self, tenant_id):
        with pytest.raises(ValueError):
            keys.transaction_key(tenant_id, 'TXN-1')

    def test_tenants_get_distinct_keys(self):
        assert keys.daily_sales_key('a', '2024-01-01') != keys.daily_sales_key('b', '2024-01-01')
