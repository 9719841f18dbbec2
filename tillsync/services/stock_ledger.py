"""
Stock Ledger
Decides whether a basket can be fulfilled and applies the decrement across
every inventory projection.

The same inventory is stored four times, each under its own key:

    catalog           primary, the only projection the check phase trusts
    global catalog    mirror of the catalog, matched by product id
    item ledger       per-item stock and sales counters, matched by name or id
    operational view  manager-facing stock, matched by name or product id

The store has no multi-key transaction, so a sale is committed as one
authoritative write to the catalog followed by independent mirror writes.
A failed mirror write is logged as a SyncWarning and the sale goes ahead;
the projections then drift until the next reconciliation.
"""

import logging
from dataclasses import dataclass, field
from typing import List
from tillsync.constants import Messages
from tillsync.exceptions import StockError, PersistenceError, SyncWarning
from tillsync.utils import keys
from tillsync.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10

# Seed values for item-ledger records created on first sale
NEW_LEDGER_MAX_STOCK = 100
NEW_LEDGER_REORDER_LEVEL = 20


@dataclass
class StockUpdate:
    """One line of the stock-update plan"""

    index: int
    record: dict
    item: dict
    quantity_to_reduce: int
    new_stock: int


@dataclass
class StockCheckResult:
    """Outcome of the check phase"""

    catalog: list
    updates: List[StockUpdate] = field(default_factory=list)
    errors: List[dict] = field(default_factory=list)

    @property
    def is_available(self):
        return not self.errors


@dataclass
class StockApplyResult:
    """Outcome of the apply phase; warnings are for logs, not for callers"""

    updates: List[StockUpdate]
    warnings: List[SyncWarning] = field(default_factory=list)


def is_low_stock(stock, min_stock=None, threshold=DEFAULT_LOW_STOCK_THRESHOLD):
    """Low-stock flag: stock at or below min_stock, or the threshold when unset"""
    limit = threshold if min_stock is None else min_stock
    return stock <= limit


class StockLedger:
    """Check-then-apply stock reduction for one tenant"""

    def __init__(self, store, tenant_id, low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD):
        self.store = store
        self.tenant_id = tenant_id
        self.low_stock_threshold = low_stock_threshold

    def _key(self, projection):
        return keys.projection_key(self.tenant_id, projection)

    def _low_stock(self, stock, record):
        return is_low_stock(stock, record.get('min_stock'), self.low_stock_threshold)

    def check_availability(self, items):
        """
        Check every line against the primary catalog

        The catalog is read once. Lines for the same product draw down a
        shared running balance, so a basket cannot oversell by splitting a
        product across several lines.

        Args:
            items: Validated line items

        Returns:
            StockCheckResult with the plan and any per-line errors
        """
        catalog = self.store.get(self._key(keys.CATALOG), [])
        result = StockCheckResult(catalog=catalog)
        remaining = {}

        for item in items:
            index = next(
                (i for i, product in enumerate(catalog) if product.get('id') == item['id']),
                None
            )
            if index is None:
                result.errors.append({
                    'product_id': item['id'],
                    'product_name': item.get('name'),
                    'requested_quantity': item['quantity'],
                    'available_stock': 0,
                    'shortfall': item['quantity'],
                    'error': Messages.PRODUCT_NOT_FOUND
                })
                continue

            product = catalog[index]
            available = remaining.get(index, product.get('stock') or 0)

            if available >= item['quantity']:
                new_stock = available - item['quantity']
                remaining[index] = new_stock
                result.updates.append(StockUpdate(
                    index=index,
                    record=product,
                    item=item,
                    quantity_to_reduce=item['quantity'],
                    new_stock=new_stock
                ))
            else:
                result.errors.append({
                    'product_id': item['id'],
                    'product_name': item.get('name'),
                    'requested_quantity': item['quantity'],
                    'available_stock': available,
                    'shortfall': item['quantity'] - available,
                    'error': Messages.INSUFFICIENT_STOCK
                })

        return result

    def apply(self, check):
        """
        Apply a passed check to every projection

        Args:
            check: StockCheckResult with no errors

        Returns:
            StockApplyResult

        Raises:
            PersistenceError: The primary catalog write failed
        """
        now = utc_now_iso()
        self._apply_catalog(check.catalog, check.updates, now)

        result = StockApplyResult(updates=check.updates)
        for projection, mirror in (
            (keys.GLOBAL_CATALOG, self._mirror_global_catalog),
            (keys.ITEM_LEDGER, self._upsert_item_ledger),
            (keys.OPERATIONAL_VIEW, self._mirror_operational_view),
        ):
            warning = self._run_mirror(projection, mirror, check.updates, now)
            if warning:
                result.warnings.append(warning)

        return result

    def process(self, items):
        """
        Check the basket and, if every line can be fulfilled, apply it

        Raises:
            StockError: Any line is missing or short; nothing is written
            PersistenceError: The primary catalog write failed
        """
        check = self.check_availability(items)
        if not check.is_available:
            logger.info(f"Stock check failed for tenant {self.tenant_id}: "
                        f"{len(check.errors)} line(s) rejected")
            raise StockError(check.errors)

        return self.apply(check)

    def _apply_catalog(self, catalog, updates, now):
        """Write every new stock value to the primary catalog in one batch"""
        for update in updates:
            record = catalog[update.index]
            record['stock'] = update.new_stock
            record['last_updated'] = now
            record['low_stock_alert'] = self._low_stock(update.new_stock, record)

        try:
            self.store.set(self._key(keys.CATALOG), catalog)
        except Exception as e:
            logger.error(f"Primary catalog write failed for tenant {self.tenant_id}: {e}")
            raise PersistenceError(Messages.FAILED_TO_UPDATE_STOCK) from e

    def _run_mirror(self, projection, mirror, updates, now):
        """Run one mirror step; a failure is logged and returned, never raised"""
        try:
            mirror(updates, now)
        except Exception as e:
            warning = SyncWarning(projection, e)
            logger.warning(f"[tenant {self.tenant_id}] {warning.message}")
            return warning
        return None

    def _mirror_global_catalog(self, updates, now):
        key = self._key(keys.GLOBAL_CATALOG)
        products = self.store.get(key, [])

        for update in updates:
            product_id = update.record.get('id')
            match = next((p for p in products if p.get('id') == product_id), None)
            if match is None:
                logger.debug(f"Product {product_id} not in global catalog, skipping")
                continue
            match['stock'] = update.new_stock
            match['last_updated'] = now
            match['low_stock_alert'] = self._low_stock(update.new_stock, match)

        self.store.set(key, products)

    def _upsert_item_ledger(self, updates, now):
        key = self._key(keys.ITEM_LEDGER)
        ledger = self.store.get(key, [])
        today = now[:10]

        for update in updates:
            item = update.item
            match = next(
                (r for r in ledger if r.get('name') == item.get('name') or r.get('id') == item['id']),
                None
            )
            if match is not None:
                new_stock = max(0, (match.get('current_stock') or 0) - update.quantity_to_reduce)
                match.update({
                    'current_stock': new_stock,
                    'total_sold': (match.get('total_sold') or 0) + update.quantity_to_reduce,
                    'last_sale': now,
                    'last_updated': today,
                    'low_stock_alert': self._low_stock(new_stock, match)
                })
            else:
                record = {
                    'id': item['id'],
                    'name': item.get('name'),
                    'current_stock': update.new_stock,
                    'min_stock': self.low_stock_threshold,
                    'max_stock': NEW_LEDGER_MAX_STOCK,
                    'reorder_level': NEW_LEDGER_REORDER_LEVEL,
                    'total_sold': update.quantity_to_reduce,
                    'last_sale': now,
                    'last_updated': today
                }
                record['low_stock_alert'] = self._low_stock(update.new_stock, record)
                ledger.append(record)
                logger.info(f"Created item-ledger record for {item['id']} from sale")

        self.store.set(key, ledger)

    def _mirror_operational_view(self, updates, now):
        key = self._key(keys.OPERATIONAL_VIEW)
        inventory = self.store.get(key, [])

        for update in updates:
            item = update.item
            match = next(
                (r for r in inventory
                 if r.get('name') == item.get('name') or r.get('product_id') == item['id']),
                None
            )
            if match is None:
                logger.debug(f"Product {item['id']} not in operational view, skipping")
                continue
            new_stock = max(0, (match.get('current_stock') or 0) - update.quantity_to_reduce)
            match.update({
                'current_stock': new_stock,
                'total_sold': (match.get('total_sold') or 0) + update.quantity_to_reduce,
                'last_updated': now,
                'low_stock_alert': self._low_stock(new_stock, match)
            })

        self.store.set(key, inventory)
