"""
Sale Service
Orchestrates the sale-commit path for one tenant:

    validate -> totals -> stock ledger -> transaction store -> daily summary

Everything before the transaction write can reject the sale. Once the
transaction is stored the sale is final; a failure updating the daily
summary after that point is logged and the sale is still reported as
successful.
"""

import logging
from flask import current_app
from tillsync.constants import DATE_FORMAT, TRANSACTION_STATUS_COMPLETED
from tillsync.kv_store import KVStore
from tillsync.services.daily_aggregator import DailyAggregator
from tillsync.services.stock_ledger import StockLedger
from tillsync.services.totals import (
    calculate_totals, check_cash_payment, calculate_change, item_tax_rate
)
from tillsync.services.transaction_store import TransactionStore
from tillsync.services.validator import validate_sale
from tillsync.utils.helpers import generate_transaction_id, generate_receipt_number, utc_now

logger = logging.getLogger(__name__)


def build_line_item(item, default_tax_rate):
    """Snapshot of a basket line as stored on the transaction"""
    return {
        'id': item['id'],
        'name': item['name'],
        'unit_price': item['unit_price'],
        'quantity': item['quantity'],
        'total': item['unit_price'] * item['quantity'],
        'barcode': item.get('barcode'),
        'tax_rate': item_tax_rate(item, default_tax_rate)
    }


class SaleService:
    """Exposed sale operations, scoped to a tenant"""

    def __init__(self, tenant_id, store=None, config=None):
        self.tenant_id = tenant_id
        self.store = store or KVStore()
        self.config = config if config is not None else current_app.config

    @property
    def transactions(self):
        return TransactionStore(self.store, self.tenant_id)

    @property
    def aggregator(self):
        return DailyAggregator(self.store, self.tenant_id)

    def commit_sale(self, items, payment_method, payment_received, cashier=None, terminal=None):
        """
        Validate, stock-check and commit a sale

        Args:
            items: Basket lines (id, name, unit_price, quantity, optional tax_rate/barcode)
            payment_method: cash, card or mobile
            payment_received: Amount tendered
            cashier: Optional cashier name
            terminal: Optional terminal ID

        Returns:
            dict: The committed transaction

        Raises:
            ValidationError: Bad basket or payment (incl. InsufficientPaymentError)
            StockError: A line cannot be fulfilled; nothing was written
            PersistenceError: Stock or transaction write failed; retry the sale
        """
        default_tax_rate = self.config.get('DEFAULT_TAX_RATE', 0.15)

        validate_sale(
            items, payment_method, payment_received,
            max_items=self.config.get('MAX_ITEMS_PER_TRANSACTION', 100),
            min_payment=self.config.get('MIN_PAYMENT_AMOUNT', 0.01)
        )

        totals = calculate_totals(items, default_tax_rate=default_tax_rate)
        check_cash_payment(payment_method, payment_received, totals['total'])

        ledger = StockLedger(
            self.store, self.tenant_id,
            low_stock_threshold=self.config.get('LOW_STOCK_THRESHOLD', 10)
        )
        stock_result = ledger.process(items)
        for warning in stock_result.warnings:
            logger.warning(f"Sale continued despite projection drift: {warning.message}")

        now = utc_now()
        transaction = {
            'id': generate_transaction_id(),
            'receipt_number': generate_receipt_number(),
            'tenant_id': self.tenant_id,
            'timestamp': now.isoformat().replace('+00:00', 'Z'),
            'items': [build_line_item(item, default_tax_rate) for item in items],
            'subtotal': totals['subtotal'],
            'tax': totals['tax'],
            'total': totals['total'],
            'payment_method': payment_method,
            'payment_received': payment_received,
            'change': calculate_change(payment_method, payment_received, totals['total']),
            'cashier': cashier or self.config.get('DEFAULT_CASHIER', 'Unknown'),
            'terminal': terminal or self.config.get('DEFAULT_TERMINAL', 'POS-001'),
            'status': TRANSACTION_STATUS_COMPLETED
        }

        sale_date = now.strftime(DATE_FORMAT)
        self.transactions.commit(transaction, sale_date)

        try:
            self.aggregator.apply_sale(sale_date, totals, payment_method)
        except Exception as e:
            logger.error(f"Error updating daily sales for {transaction['id']}: {e}")

        logger.info(f"Transaction completed successfully: {transaction['id']} "
                    f"(tenant {self.tenant_id}, total {totals['total']})")
        return transaction

    def get_transaction(self, transaction_id):
        """Get a committed transaction; NotFoundError if absent"""
        return self.transactions.fetch(transaction_id)

    def get_daily_sales(self, date):
        """Day's summary, zeroed when there were no sales; ValidationError on bad date"""
        return self.aggregator.get_summary(date)

    def list_transactions(self, date):
        """Day's transactions and their count"""
        return self.transactions.list_for_date(date)
