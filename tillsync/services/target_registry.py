"""
Target Registry
CRUD over daily targets, stored as one list per tenant and day.

A target is created active, may be toggled any number of times, and is then
deleted. Its current_value is never written by the commit path: sales and
transactions targets read it from the day's summary when listed, items
targets are updated by hand.

Targets are not indexed by ID. Deleting by ID scans today and the preceding
days up to TARGET_LOOKUP_DAYS; an older target can only be changed through
its date.
"""

import logging
import math
from tillsync.constants import Messages, TargetTypes
from tillsync.exceptions import ValidationError, NotFoundError
from tillsync.services.daily_aggregator import DailyAggregator
from tillsync.utils import keys
from tillsync.utils.helpers import (
    generate_target_id, is_valid_date, is_number, recent_dates, utc_now_iso
)

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_DAYS = 7


def _require_date(date):
    if not date or not is_valid_date(date):
        raise ValidationError(Messages.INVALID_DATE_FORMAT, field='date')


def _parse_target_type(target_type):
    if target_type not in TargetTypes.ALL:
        raise ValidationError(
            Messages.TARGET_TYPE_INVALID.format(types=', '.join(TargetTypes.ALL)),
            field='target_type'
        )
    return target_type


def _parse_target_value(target_value):
    try:
        value = float(target_value)
    except (TypeError, ValueError):
        raise ValidationError(Messages.TARGET_VALUE_INVALID, field='target_value')
    if isinstance(target_value, bool) or not math.isfinite(value) or value <= 0:
        raise ValidationError(Messages.TARGET_VALUE_INVALID, field='target_value')
    return value


def calculate_progress(current_value, target_value):
    """Percentage of the target reached, capped at 100"""
    if not target_value:
        return 0
    return min(100.0, current_value / target_value * 100)


class TargetRegistry:
    """Daily targets for one tenant"""

    def __init__(self, store, tenant_id, lookup_days=DEFAULT_LOOKUP_DAYS):
        self.store = store
        self.tenant_id = tenant_id
        self.lookup_days = lookup_days

    def _load(self, date):
        return self.store.get(keys.daily_targets_key(self.tenant_id, date), [])

    def _save(self, date, targets):
        self.store.set(keys.daily_targets_key(self.tenant_id, date), targets)

    def create_target(self, target_type, target_value, date, description=''):
        """
        Create an active target for a day

        Raises:
            ValidationError: Missing fields, bad date, unknown type or value <= 0
        """
        if not target_type or target_value is None or target_value == '' or not date:
            raise ValidationError(Messages.TARGET_FIELDS_REQUIRED)
        _require_date(date)

        target = {
            'id': generate_target_id(),
            'tenant_id': self.tenant_id,
            'date': date,
            'target_type': _parse_target_type(target_type),
            'target_value': _parse_target_value(target_value),
            'current_value': 0,
            'progress': 0,
            'description': description or '',
            'is_active': True,
            'created_at': utc_now_iso()
        }

        targets = self._load(date)
        targets.append(target)
        self._save(date, targets)

        logger.info(f"Created {target['target_type']} target {target['id']} for {date}")
        return target

    def update_target(self, target_id, date, target_type=None, target_value=None,
                      description=None, is_active=None, current_value=None):
        """
        Update fields of a target on a given day; omitted fields are kept

        Raises:
            ValidationError: Bad date or field value
            NotFoundError: No target with that ID on that day
        """
        _require_date(date)

        targets = self._load(date)
        target = next((t for t in targets if t.get('id') == target_id), None)
        if target is None:
            raise NotFoundError(Messages.TARGET_NOT_FOUND, entity_id=target_id)

        if target_type:
            target['target_type'] = _parse_target_type(target_type)
        if target_value is not None:
            target['target_value'] = _parse_target_value(target_value)
        if description is not None:
            target['description'] = description
        if is_active is not None:
            target['is_active'] = bool(is_active)
        if current_value is not None:
            if not is_number(current_value) or current_value < 0:
                raise ValidationError('Current value must be a number of at least 0',
                                      field='current_value')
            target['current_value'] = current_value
        target['progress'] = calculate_progress(target.get('current_value') or 0,
                                                target['target_value'])
        target['updated_at'] = utc_now_iso()

        self._save(date, targets)
        return target

    def set_active(self, target_id, date, is_active):
        """Toggle a target on or off"""
        return self.update_target(target_id, date, is_active=is_active)

    def delete_target(self, target_id, today=None):
        """
        Delete a target by ID

        Only the last lookup_days days are searched, newest first. The target
        is removed from its own day's list and nowhere else.

        Args:
            target_id: Target to delete
            today: Optional YYYY-MM-DD anchor for the search window

        Returns:
            dict: The deleted target

        Raises:
            NotFoundError: Not found within the window
        """
        for date in recent_dates(self.lookup_days, today=today):
            targets = self._load(date)
            index = next((i for i, t in enumerate(targets) if t.get('id') == target_id), None)
            if index is not None:
                deleted = targets.pop(index)
                self._save(date, targets)
                logger.info(f"Deleted target {target_id} from {date}")
                return deleted

        raise NotFoundError(Messages.TARGET_NOT_FOUND, entity_id=target_id)

    def list_targets(self, date):
        """
        List a day's targets with progress read from the day's summary

        The refreshed current_value and progress are returned, not stored.
        """
        _require_date(date)

        targets = self._load(date)
        if not targets:
            return []

        summary = DailyAggregator(self.store, self.tenant_id).get_summary(date)
        for target in targets:
            summary_field = TargetTypes.SUMMARY_FIELDS.get(target.get('target_type'))
            if summary_field:
                target['current_value'] = summary.get(summary_field, 0)
            target['progress'] = calculate_progress(target.get('current_value') or 0,
                                                    target.get('target_value'))
        return targets
