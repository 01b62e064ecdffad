from datetime import datetime
import re
import pytz

UTC = pytz.utc

# Characters not allowed in Drive folder names or local directory names on Windows
_UNSAFE_TIMESTAMP_CHARS = re.compile(r"[:.]")


def get_utc_now() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)


def now_millis() -> int:
    """Milliseconds since the epoch, used to build upload report ids."""
    return int(get_utc_now().timestamp() * 1000)


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to aware UTC. Naive values are assumed to be UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def sanitize_timestamp(value) -> str:
    """
    Make a timestamp usable as a folder name.
    '2024-01-01T10:00:00.500+00:00' -> '2024-01-01T10-00-00-500+00-00'
    """
    if isinstance(value, datetime):
        value = to_utc(value).isoformat()
    return _UNSAFE_TIMESTAMP_CHARS.sub("-", str(value))
