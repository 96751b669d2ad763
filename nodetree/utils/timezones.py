"""Display formatting for node timestamps."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_valid_timezone(name: str | None) -> bool:
    """True if ``name`` is a known IANA timezone, e.g. "Europe/Madrid"."""
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: names like "America" resolve to a tzdata directory
        return False
    return True


def to_iso_utc(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. "2024-01-15T12:30:45.123Z"."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_timestamp(value: datetime, timezone: str | None = None) -> str:
    """Render a timestamp for API output.

    - no timezone: UTC as "YYYY-MM-DD HH:MM:SS"
    - valid timezone: local time in that zone, same format
    - unknown timezone: ISO-8601 in UTC, see ``to_iso_utc``
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    utc_value = value.astimezone(UTC)

    if not timezone:
        return utc_value.strftime(_DISPLAY_FORMAT)
    if not is_valid_timezone(timezone):
        return to_iso_utc(utc_value)
    return utc_value.astimezone(ZoneInfo(timezone)).strftime(_DISPLAY_FORMAT)
