"""
Helper Utilities
Identifier generation and date helpers used across the sale-commit path
"""

from datetime import datetime, timedelta, timezone
import math
import random
import re
import string
import time
from tillsync.constants import DATE_FORMAT

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def generate_transaction_id():
    """
    Generate unique transaction ID

    Format: TXN-<epoch millis>-XXXX
    Where XXXX is a random 4-digit number

    Returns:
        str: Transaction ID
    """
    millis = int(time.time() * 1000)
    random_part = ''.join(random.choices(string.digits, k=4))
    return f"TXN-{millis}-{random_part}"


def generate_receipt_number():
    """
    Generate receipt number

    Format: RCP-YYYYMMDD-HHMMSS-XXX (UTC)

    Returns:
        str: Receipt number
    """
    now = datetime.now(timezone.utc)
    random_part = ''.join(random.choices(string.digits, k=3))
    return f"RCP-{now.strftime('%Y%m%d')}-{now.strftime('%H%M%S')}-{random_part}"


def generate_inventory_id():
    """
    Generate inventory item ID

    Format: INV-<epoch millis>-XXXX

    Returns:
        str: Inventory item ID
    """
    millis = int(time.time() * 1000)
    random_part = ''.join(random.choices(string.digits, k=4))
    return f"INV-{millis}-{random_part}"


def generate_target_id():
    """
    Generate daily target ID

    Format: target_<epoch millis>_<9 random base36 characters>

    Returns:
        str: Target ID
    """
    millis = int(time.time() * 1000)
    random_part = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"target_{millis}_{random_part}"


def is_valid_date(value):
    """
    Check a YYYY-MM-DD string names a real calendar day

    '2024-02-30' matches the pattern but is rejected.

    Args:
        value: Date string

    Returns:
        bool: True if valid
    """
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def utc_now():
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def utc_now_iso():
    """Current UTC time as an ISO-8601 string"""
    return utc_now().isoformat().replace('+00:00', 'Z')


def utc_today():
    """Today's UTC date as YYYY-MM-DD"""
    return utc_now().strftime(DATE_FORMAT)


def recent_dates(days, today=None):
    """
    List today and the preceding days, newest first

    Args:
        days: Number of dates to return
        today: Optional YYYY-MM-DD anchor (defaults to UTC today)

    Returns:
        list: Date strings
    """
    anchor = datetime.strptime(today, DATE_FORMAT) if today else utc_now()
    return [(anchor - timedelta(days=i)).strftime(DATE_FORMAT) for i in range(days)]


def is_number(value):
    """True for finite int/float values, excluding booleans"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN and Infinity parse from JSON as floats
    return isinstance(value, int) or math.isfinite(value)
