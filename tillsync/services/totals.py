"""
Totals Calculator
Derives subtotal, tax and grand total from line items. No rounding is applied;
formatting money for display is left to the client.
"""

from tillsync.constants import PaymentMethods
from tillsync.exceptions import InsufficientPaymentError

DEFAULT_TAX_RATE = 0.15


def item_tax_rate(item, default_tax_rate=DEFAULT_TAX_RATE):
    """The item's own tax rate, or the default when it has none (0 is kept)"""
    tax_rate = item.get('tax_rate')
    return default_tax_rate if tax_rate is None else tax_rate


def calculate_totals(items, default_tax_rate=DEFAULT_TAX_RATE):
    """
    Calculate transaction totals

    Args:
        items: Validated line items
        default_tax_rate: Rate used for items without a tax_rate

    Returns:
        dict: subtotal, tax and total
    """
    subtotal = sum(item['unit_price'] * item['quantity'] for item in items)
    tax = sum(
        item['unit_price'] * item['quantity'] * item_tax_rate(item, default_tax_rate)
        for item in items
    )
    return {
        'subtotal': subtotal,
        'tax': tax,
        'total': subtotal + tax
    }


def check_cash_payment(payment_method, payment_received, total):
    """
    Cash must cover the grand total; card and mobile are settled externally.

    Raises:
        InsufficientPaymentError: With the required and received amounts
    """
    if payment_method == PaymentMethods.CASH and payment_received < total:
        raise InsufficientPaymentError(required=total, received=payment_received)


def calculate_change(payment_method, payment_received, total):
    """Change due to the customer; only cash sales give change"""
    if payment_method == PaymentMethods.CASH:
        return payment_received - total
    return 0
