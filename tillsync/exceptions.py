"""
Domain Exceptions
Every error raised by the sale-commit path derives from TillsyncError, so
routes can translate the whole family into JSON responses in one place.
"""


class TillsyncError(Exception):
    """Base exception for all sale-commit and inventory errors"""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'error': self.message}


class ValidationError(TillsyncError):
    """
    Raised when a basket, payment, date or target payload is malformed.

    Raised before any side effect, so the caller can fix the input and retry.
    """

    status_code = 400

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    def to_dict(self):
        data = super().to_dict()
        if self.field:
            data['field'] = self.field
        return data


class InsufficientPaymentError(ValidationError):
    """Raised when a cash payment does not cover the grand total"""

    def __init__(self, required, received):
        super().__init__('Insufficient payment amount', field='payment_received')
        self.required = required
        self.received = received

    def to_dict(self):
        data = super().to_dict()
        data['required'] = self.required
        data['received'] = self.received
        return data


class StockError(TillsyncError):
    """
    Raised when one or more lines cannot be fulfilled from the primary catalog.

    Carries every per-line problem, not just the first, so the cashier sees
    the whole basket's shortfalls at once. Nothing has been written.
    """

    status_code = 400

    def __init__(self, errors):
        super().__init__('Insufficient stock for some items')
        self.errors = errors

    def to_dict(self):
        data = super().to_dict()
        data['stock_errors'] = self.errors
        return data


class PersistenceError(TillsyncError):
    """
    Raised when an authoritative write fails (primary catalog or transaction).

    The sale is not final; the caller should retry the whole operation.
    """

    status_code = 500

    def to_dict(self):
        data = super().to_dict()
        data['retry'] = True
        return data


class NotFoundError(TillsyncError):
    """Raised when a transaction, target or inventory item lookup finds nothing"""

    status_code = 404

    def __init__(self, message, entity_id=None):
        super().__init__(message)
        self.entity_id = entity_id

    def to_dict(self):
        data = super().to_dict()
        if self.entity_id is not None:
            data['id'] = self.entity_id
        return data


class SyncWarning(TillsyncError):
    """
    A secondary projection write failed.

    Logged and collected by the stock ledger, never raised to callers.
    """

    def __init__(self, projection, cause):
        super().__init__(f'Failed to update {projection} projection: {cause}')
        self.projection = projection
        self.cause = cause
