"""
Key-Value Store
Single-key get/set/delete over the kv_store table.

Each write commits on its own; there is no multi-key transaction, lock or
compare-and-swap. Callers that read-modify-write a key race with each other.
"""

import copy
import logging
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified
from tillsync.models import db, KVEntry

logger = logging.getLogger(__name__)


class KVStore:
    """Durable flat key-value store"""

    def __init__(self, session=None):
        self.session = session or db.session

    def get(self, key, default=None):
        """
        Read a key

        Args:
            key: Storage key
            default: Returned when the key is absent

        Returns:
            A deep copy of the stored value, so callers can mutate it freely
        """
        entry = self.session.get(KVEntry, key)
        if entry is None or entry.value is None:
            return default
        return copy.deepcopy(entry.value)

    def set(self, key, value):
        """Write a key, replacing any previous value"""
        value = copy.deepcopy(value)
        try:
            entry = self.session.get(KVEntry, key)
            if entry is None:
                entry = KVEntry(key=key, value=value)
                self.session.add(entry)
            else:
                entry.value = value
                entry.updated_at = datetime.utcnow()
                flag_modified(entry, 'value')
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error writing key {key}: {e}")
            raise
        return True

    def delete(self, key):
        """Delete a key; deleting an absent key is not an error"""
        try:
            entry = self.session.get(KVEntry, key)
            if entry is not None:
                self.session.delete(entry)
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error deleting key {key}: {e}")
            raise
        return True
