"""
Calendar date helpers.

The database returns event dates as date-only strings ("2025-03-15") and
booking timestamps as ISO datetimes. Date-only values are treated as local
midnight so the day shown is the day booked.
"""
import re
from datetime import date, datetime
from typing import Optional, Union

DATE_ONLY_REGEX = re.compile(r'^\d{4}-\d{2}-\d{2}$')

DateLike = Union[str, date, datetime, None]


def parse_calendar_date(value: DateLike) -> Optional[datetime]:
    """
    Parse a date-like value into a naive datetime.

    Returns None for None, empty, or unparseable input. Timezone-aware values
    are converted to naive UTC so they compare with datetime.utcnow().
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None

        if DATE_ONLY_REGEX.match(text):
            try:
                return datetime.strptime(text, '%Y-%m-%d')
            except ValueError:
                return None

        try:
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    return parsed


def format_calendar_date(value: DateLike, fmt: str = '%d %b %Y', fallback: str = '') -> str:
    """Format a date-like value for display, or return the fallback."""
    parsed = parse_calendar_date(value)
    if not parsed:
        return fallback
    return parsed.strftime(fmt)
