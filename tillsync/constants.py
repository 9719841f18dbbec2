"""
Shared constants for the sale-commit path: user-facing messages, payment
methods, target types and status values.
"""


class Messages:
    """User-facing error and success messages"""

    INVALID_ITEMS = 'Invalid or empty items array'
    TOO_MANY_ITEMS = 'Too many items. Maximum {limit} allowed'
    INVALID_ITEM_DATA = 'Invalid item data. Each item must have id, name, unit_price, and quantity'
    INVALID_ITEM_VALUES = 'Invalid item values. Price must not be negative and quantity must be positive'
    INVALID_TAX_RATE = 'Invalid tax rate. Must be between 0 and 1'
    PAYMENT_METHOD_REQUIRED = 'Payment method is required'
    PAYMENT_METHOD_INVALID = 'Unsupported payment method. Use one of: {methods}'
    PAYMENT_AMOUNT_INVALID = 'Payment received must be greater than 0'
    PAYMENT_TOO_SMALL = 'Payment amount too small. Minimum {minimum}'
    INSUFFICIENT_PAYMENT = 'Insufficient payment amount'
    TRANSACTION_ID_REQUIRED = 'Transaction ID is required'
    INVALID_DATE_FORMAT = 'Valid date in YYYY-MM-DD format is required'
    TARGET_FIELDS_REQUIRED = 'Target type, value, and date are required'
    TARGET_TYPE_INVALID = 'Target type must be one of: {types}'
    TARGET_VALUE_INVALID = 'Target value must be a number greater than 0'
    TARGET_NOT_FOUND = 'Target not found'
    TRANSACTION_NOT_FOUND = 'Transaction not found'
    PRODUCT_NOT_FOUND = 'Product not found'
    INSUFFICIENT_STOCK = 'Insufficient stock for some items'
    FAILED_TO_UPDATE_STOCK = 'Failed to update stock'
    FAILED_TO_STORE = 'Failed to store transaction'
    INVENTORY_FIELDS_REQUIRED = 'Missing required fields: name, unit_price, current_stock'
    INVENTORY_DUPLICATE = 'Item with this name, barcode or ID already exists'
    FAILED_TO_CREATE_ITEM = 'Failed to create inventory item'
    FAILED_TO_UPDATE_ITEM = 'Failed to update inventory item'
    FAILED_TO_DELETE_ITEM = 'Failed to delete inventory item'
    INVENTORY_ITEM_NOT_FOUND = 'Inventory item not found'
    FAILED_TO_RECONCILE = 'Failed to write synced inventory'
    TENANT_REQUIRED = 'Tenant ID header is required'
    INTERNAL_ERROR = 'Internal server error during transaction processing'

    TRANSACTION_PROCESSED = 'Transaction processed successfully'
    TARGET_CREATED = 'Target created successfully'
    TARGET_UPDATED = 'Target updated successfully'
    TARGET_DELETED = 'Target deleted successfully'
    INVENTORY_ITEM_CREATED = 'Inventory item created successfully'
    INVENTORY_ITEM_UPDATED = 'Inventory item updated successfully'
    INVENTORY_ITEM_DELETED = 'Inventory item deleted successfully'
    INVENTORY_RECONCILED = 'Inventory reconciled successfully'


class PaymentMethods:
    """Accepted payment methods"""
    CASH = 'cash'
    CARD = 'card'
    MOBILE = 'mobile'

    ALL = (CASH, CARD, MOBILE)


class TargetTypes:
    """Daily target kinds and the summary field each one tracks"""
    SALES = 'sales'
    TRANSACTIONS = 'transactions'
    ITEMS = 'items'

    ALL = (SALES, TRANSACTIONS, ITEMS)

    # items has no automatic source and is updated by hand
    SUMMARY_FIELDS = {
        SALES: 'total_sales',
        TRANSACTIONS: 'total_transactions',
    }


TRANSACTION_STATUS_COMPLETED = 'completed'

DATE_FORMAT = '%Y-%m-%d'
