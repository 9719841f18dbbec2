"""
Sale Validator
Checks basket shape, item fields and payment intent before anything is read
or written.

Rules are checked in a fixed order and the first violation wins:
    1. basket present, non-empty, not larger than the configured maximum
    2. every item well-formed (id, name, numeric price/quantity, valid values)
    3. payment method present and supported
    4. payment amount present, positive and at least the configured minimum
"""

from tillsync.constants import Messages, PaymentMethods
from tillsync.exceptions import ValidationError
from tillsync.utils.helpers import is_number

DEFAULT_MAX_ITEMS = 100
DEFAULT_MIN_PAYMENT = 0.01


def validate_items(items, max_items=DEFAULT_MAX_ITEMS):
    """
    Validate the basket

    Args:
        items: List of line item dicts
        max_items: Maximum number of lines allowed

    Raises:
        ValidationError: On the first malformed line or basket-level problem
    """
    if not items or not isinstance(items, list):
        raise ValidationError(Messages.INVALID_ITEMS, field='items')

    if len(items) > max_items:
        raise ValidationError(Messages.TOO_MANY_ITEMS.format(limit=max_items), field='items')

    for index, item in enumerate(items):
        field = f'items[{index}]'
        if not isinstance(item, dict):
            raise ValidationError(Messages.INVALID_ITEM_DATA, field=field)

        if (not item.get('id') or not item.get('name')
                or not is_number(item.get('unit_price'))
                or not is_number(item.get('quantity'))):
            raise ValidationError(Messages.INVALID_ITEM_DATA, field=field)

        if item['unit_price'] < 0 or item['quantity'] <= 0:
            raise ValidationError(Messages.INVALID_ITEM_VALUES, field=field)

        tax_rate = item.get('tax_rate')
        if tax_rate is not None and (not is_number(tax_rate) or not 0 <= tax_rate <= 1):
            raise ValidationError(Messages.INVALID_TAX_RATE, field=f'{field}.tax_rate')


def validate_payment(payment_method, payment_received, min_payment=DEFAULT_MIN_PAYMENT):
    """
    Validate the payment intent

    Args:
        payment_method: cash, card or mobile
        payment_received: Amount tendered
        min_payment: Smallest acceptable amount

    Raises:
        ValidationError: Method missing/unsupported or amount missing/too small
    """
    if not payment_method:
        raise ValidationError(Messages.PAYMENT_METHOD_REQUIRED, field='payment_method')

    if payment_method not in PaymentMethods.ALL:
        raise ValidationError(
            Messages.PAYMENT_METHOD_INVALID.format(methods=', '.join(PaymentMethods.ALL)),
            field='payment_method'
        )

    if not is_number(payment_received) or payment_received <= 0:
        raise ValidationError(Messages.PAYMENT_AMOUNT_INVALID, field='payment_received')

    if payment_received < min_payment:
        raise ValidationError(Messages.PAYMENT_TOO_SMALL.format(minimum=min_payment),
                              field='payment_received')


def validate_sale(items, payment_method, payment_received,
                  max_items=DEFAULT_MAX_ITEMS, min_payment=DEFAULT_MIN_PAYMENT):
    """Validate basket then payment, in rule order. No side effects."""
    validate_items(items, max_items=max_items)
    validate_payment(payment_method, payment_received, min_payment=min_payment)
