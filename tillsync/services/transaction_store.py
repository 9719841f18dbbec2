"""
Transaction Store
Persists immutable transaction records and the per-day index of their IDs.
"""

import logging
from tillsync.constants import Messages
from tillsync.exceptions import PersistenceError, NotFoundError, ValidationError
from tillsync.utils import keys
from tillsync.utils.helpers import is_valid_date

logger = logging.getLogger(__name__)


class TransactionStore:
    """Append-only transaction log for one tenant"""

    def __init__(self, store, tenant_id):
        self.store = store
        self.tenant_id = tenant_id

    def commit(self, transaction, date):
        """
        Write a transaction and append its ID to the day's index

        The index is read, extended and written back as a whole list, so two
        commits racing on the same tenant and day can drop one ID.

        Args:
            transaction: Complete transaction dict
            date: YYYY-MM-DD day the transaction belongs to

        Raises:
            PersistenceError: Either write failed; the sale is not final
        """
        transaction_id = transaction['id']
        try:
            self.store.set(keys.transaction_key(self.tenant_id, transaction_id), transaction)

            index_key = keys.daily_transactions_key(self.tenant_id, date)
            transaction_ids = self.store.get(index_key, [])
            transaction_ids.append(transaction_id)
            self.store.set(index_key, transaction_ids)
        except Exception as e:
            logger.error(f"Error storing transaction {transaction_id}: {e}")
            raise PersistenceError(Messages.FAILED_TO_STORE) from e

        logger.info(f"Transaction stored successfully: {transaction_id}")
        return transaction

    def fetch(self, transaction_id):
        """
        Get a transaction by ID

        Raises:
            ValidationError: No ID given
            NotFoundError: No record under that ID for this tenant
        """
        if not transaction_id:
            raise ValidationError(Messages.TRANSACTION_ID_REQUIRED, field='transaction_id')

        transaction = self.store.get(keys.transaction_key(self.tenant_id, transaction_id))
        if not transaction:
            logger.info(f"Transaction {transaction_id} not found for tenant {self.tenant_id}")
            raise NotFoundError(Messages.TRANSACTION_NOT_FOUND, entity_id=transaction_id)

        return transaction

    def list_ids(self, date):
        """IDs in the day's index, in commit order"""
        return self.store.get(keys.daily_transactions_key(self.tenant_id, date), [])

    def list_for_date(self, date):
        """
        Get every transaction committed on a day

        IDs whose record is missing or unreadable are skipped, not fatal.

        Returns:
            tuple: (transactions, count)
        """
        if not is_valid_date(date):
            raise ValidationError(Messages.INVALID_DATE_FORMAT, field='date')

        transactions = []
        for transaction_id in self.list_ids(date):
            try:
                transaction = self.store.get(keys.transaction_key(self.tenant_id, transaction_id))
            except Exception as e:
                logger.warning(f"Error fetching transaction {transaction_id}: {e}")
                continue
            if transaction:
                transactions.append(transaction)
            else:
                logger.warning(f"Indexed transaction {transaction_id} has no record, skipping")

        return transactions, len(transactions)
