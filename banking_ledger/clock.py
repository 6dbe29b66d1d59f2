"""
Time helpers shared by the ledger components.

All instants are timezone-aware UTC datetimes; naive inputs are taken as UTC.
"""

from datetime import datetime, timezone
from typing import Callable, Union

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 string (a trailing Z is accepted) into an aware datetime"""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
