"""Date, time and text helpers for displaying events."""
import html
from datetime import date, datetime
from typing import Optional, Tuple

MONTH_ABBREVIATIONS = (
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec',
)


def parse_event_date(date_str: str) -> Optional[date]:
    """
    Parse an ISO 8601 calendar date (YYYY-MM-DD).

    Args:
        date_str: Date string from an event record

    Returns:
        date object or None if the string is not a valid date
    """
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def format_time(time_str: str) -> str:
    """
    Convert a 24-hour time (HH:MM) to 12-hour display form.

    Args:
        time_str: Time in 24-hour format, e.g. "18:00"

    Returns:
        Time such as "6:00 PM", or the input unchanged if it cannot be parsed
    """
    hour, minute = split_time(time_str)
    try:
        h = int(hour)
    except ValueError:
        return time_str
    ampm = 'PM' if h >= 12 else 'AM'
    h12 = h % 12 or 12
    return f"{h12}:{minute} {ampm}"


def split_time(time_str: str) -> Tuple[str, str]:
    """Split "HH:MM" into its hour and minute parts."""
    hour, _, minute = (time_str or '').partition(':')
    return hour.strip(), minute.strip()


def join_time(hour: str, minute: str) -> str:
    """Join form hour and minute values back into "HH:MM"."""
    return f"{hour.strip()}:{minute.strip()}"


def format_date(date_str: str) -> str:
    """
    Format an ISO date for display, e.g. "Nov 15, 2025".

    Unparseable dates are returned unchanged.
    """
    parsed = parse_event_date(date_str)
    if parsed is None:
        return date_str
    return f"{MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def date_badge(date_str: str) -> Tuple[str, str]:
    """Return the (day, short month) pair shown on an event's date badge."""
    parsed = parse_event_date(date_str)
    if parsed is None:
        return '', ''
    return str(parsed.day), MONTH_ABBREVIATIONS[parsed.month - 1]


def escape_text(text: Optional[str]) -> str:
    """
    Escape free text for safe inclusion in HTML element content.

    Only &, < and > are replaced, the same set a browser escapes when
    text content is serialized back to markup.
    """
    return html.escape(text or '', quote=False)
