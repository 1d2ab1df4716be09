import re
from datetime import datetime, timedelta, timezone

_DURATION_RE = re.compile(r'^\s*(\d+)\s*([smhd])\s*$')
_DURATION_UNITS = {
    's': 'seconds',
    'm': 'minutes',
    'h': 'hours',
    'd': 'days',
}


def get_current_utc():
    """Returns the current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def as_utc(value):
    """SQLite hands datetimes back naive; they are always stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value):
    if value is None:
        return None
    return as_utc(value).isoformat().replace('+00:00', 'Z')


def parse_duration(value, default):
    """
    Parses a duration string such as "15m", "24h" or "7d" into a timedelta.

    Args:
        value: The configured duration string, may be None.
        default: The timedelta returned when value is absent or unparseable.
    """
    if not value or not isinstance(value, str):
        return default
    match = _DURATION_RE.match(value)
    if not match:
        return default
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def normalize_id_list(value):
    """
    Normalizes a stored liked-by list into a list of ints.

    Accepts a list/tuple (elements coerced to int), a comma-delimited string,
    or None. Entries that are not integers are dropped.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple, set)):
        items = value
    elif isinstance(value, str):
        items = [part.strip() for part in value.split(',')]
    else:
        return []

    normalized = []
    for item in items:
        if item is None or item == '':
            continue
        try:
            normalized.append(int(item))
        except (TypeError, ValueError):
            continue
    return normalized


def private_room_id(user_a, user_b):
    """Deterministic 1:1 chat room id; both participants derive the same value."""
    low, high = sorted((int(user_a), int(user_b)))
    return f'private-{low}-{high}'


def coerce_int(value):
    """Returns value as an int, or None when it is absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
