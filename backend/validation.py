"""Input validation and date handling.

Everything here is pure: no storage access, no request objects.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional, Tuple

from dateutil import parser as date_parser

from errors import InvalidFieldError, MissingFieldError


YMD_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DISPLAY_FORMAT = "%a %b %d %Y"  # Mon Jan 01 2024
INT_PATTERN = re.compile(r"^[+-]?\d+$")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def validate_username(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MissingFieldError("username is required")
    return value


def _coerce_duration(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidFieldError("duration must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and INT_PATTERN.match(value.strip()):
        return int(value.strip())
    raise InvalidFieldError("duration must be an integer")


def validate_exercise_input(description: Any, duration: Any) -> Tuple[str, int]:
    """Check description/duration are present and turn duration into minutes."""
    if _is_blank(description) or _is_blank(duration):
        raise MissingFieldError("description and duration are required")
    if not isinstance(description, str):
        raise InvalidFieldError("description must be a string")
    return description, _coerce_duration(duration)


def normalize_date(raw: Optional[str], today: Optional[date] = None) -> date:
    """Return the calendar date for ``raw`` (``YYYY-MM-DD``).

    Absent input, anything not shaped exactly like ``YYYY-MM-DD`` and
    impossible dates such as ``2024-02-30`` all fall back to today (UTC).
    """
    if today is None:
        today = utc_today()
    if not isinstance(raw, str) or not YMD_PATTERN.match(raw):
        return today
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return today


def parse_date_bound(raw: Optional[str]) -> Optional[datetime]:
    """Parse a ``from``/``to`` query value with the general date parser.

    Missing parts default to the first of January, midnight, so ``2023``
    and ``2023-01`` both mean 2023-01-01. Returns a naive UTC datetime, or
    None when the value is absent or cannot be parsed. None means the
    range is open on that side.
    """
    if _is_blank(raw):
        return None
    default = datetime(utc_today().year, 1, 1)
    try:
        value = date_parser.parse(raw.strip(), default=default)
    except (ValueError, OverflowError):
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_limit(raw: Any) -> Optional[int]:
    if _is_blank(raw):
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        limit = raw
    elif isinstance(raw, str) and INT_PATTERN.match(raw.strip()):
        limit = int(raw.strip())
    else:
        return None
    return limit if limit > 0 else None


def to_storage_datetime(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def format_date_for_display(value: date) -> str:
    return value.strftime(DISPLAY_FORMAT)
