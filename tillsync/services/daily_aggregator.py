"""
Daily Aggregator
Running per-tenant, per-day sales summary maintained by the commit path.
"""

import logging
from tillsync.constants import Messages, PaymentMethods
from tillsync.exceptions import ValidationError
from tillsync.utils import keys
from tillsync.utils.helpers import is_valid_date

logger = logging.getLogger(__name__)


def default_summary(date, tenant_id):
    """Zeroed summary for a day with no sales yet"""
    return {
        'date': date,
        'tenant_id': tenant_id,
        'total_sales': 0,
        'total_transactions': 0,
        'total_tax': 0,
        'payment_methods': {method: 0 for method in PaymentMethods.ALL}
    }


def summarize(transactions, date, tenant_id):
    """
    Rebuild a day's summary from its transactions

    A summary maintained by apply_sale must equal this reduction over the
    same day's committed transactions.
    """
    summary = default_summary(date, tenant_id)
    for transaction in transactions:
        summary['total_sales'] += transaction['total']
        summary['total_transactions'] += 1
        summary['total_tax'] += transaction['tax']
        method = transaction['payment_method']
        summary['payment_methods'][method] = summary['payment_methods'].get(method, 0) + transaction['total']
    return summary


class DailyAggregator:
    """Daily sales summary for one tenant"""

    def __init__(self, store, tenant_id):
        self.store = store
        self.tenant_id = tenant_id

    def apply_sale(self, date, totals, payment_method):
        """
        Add one committed sale to the day's summary

        Single read-modify-write of the summary key. Called once per
        committed transaction, after the transaction itself is stored.

        Args:
            date: YYYY-MM-DD
            totals: dict with total and tax
            payment_method: Bucket to credit with the total

        Returns:
            dict: The updated summary
        """
        key = keys.daily_sales_key(self.tenant_id, date)
        summary = self.store.get(key) or default_summary(date, self.tenant_id)

        summary['total_sales'] += totals['total']
        summary['total_transactions'] += 1
        summary['total_tax'] += totals['tax']
        buckets = summary.setdefault('payment_methods', {})
        buckets[payment_method] = buckets.get(payment_method, 0) + totals['total']

        self.store.set(key, summary)
        return summary

    def get_summary(self, date):
        """
        Get the day's summary

        Returns a zeroed summary when the day has no sales yet.

        Raises:
            ValidationError: date is not a real YYYY-MM-DD day
        """
        if not is_valid_date(date):
            raise ValidationError(Messages.INVALID_DATE_FORMAT, field='date')

        summary = self.store.get(keys.daily_sales_key(self.tenant_id, date))
        if not summary:
            return default_summary(date, self.tenant_id)
        return summary
