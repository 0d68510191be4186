"""
Calendar-day date helpers.

All comparisons work on local calendar days: a due date "2025-11-15" is the
local day Nov 15, never a UTC instant, so nothing shifts by one near midnight.
"""
import calendar
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[str, date, datetime, None]

DATE_RANGES = ("overdue", "today", "tomorrow", "week", "month", "no-due-date")

_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_local_date(value: DateLike) -> Optional[date]:
    """
    Parse a due date into a local calendar day.

    Only the YYYY-MM-DD prefix of a string is read; any time component is ignored.
    Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _today(today: Optional[date]) -> date:
    return today or date.today()


def matches_date_range(value: DateLike, date_range: Optional[str], today: Optional[date] = None) -> bool:
    """
    Check whether a due date falls within a named range.

    Args:
        value: Due date (string, date or None)
        date_range: overdue, today, tomorrow, week, month or no-due-date
        today: Reference day (defaults to the local current day)

    Returns:
        True if the date matches; unknown ranges match everything
    """
    due = parse_local_date(value)
    if due is None:
        return date_range == "no-due-date"

    today = _today(today)
    delta = (due - today).days

    if date_range == "overdue":
        return delta < 0
    if date_range == "today":
        return delta == 0
    if date_range == "tomorrow":
        return delta == 1
    if date_range == "week":
        return 0 <= delta <= 7
    if date_range == "month":
        return today <= due <= add_months(today, 1)
    if date_range == "no-due-date":
        return False
    return True


def get_relative_date_label(value: DateLike, today: Optional[date] = None) -> Optional[str]:
    """
    Human-readable label for a due date.

    Yesterday / "Nd overdue" for past days, Today, Tomorrow, a weekday name
    within the coming week, otherwise "Nov 15" (plus ", 2027" outside the
    current year).
    """
    due = parse_local_date(value)
    if due is None:
        return None

    today = _today(today)
    delta = (due - today).days

    if delta < 0:
        days_overdue = -delta
        if days_overdue == 1:
            return "Yesterday"
        return f"{days_overdue}d overdue"
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Tomorrow"
    if delta < 7:
        return _DAY_NAMES[due.weekday()]

    label = f"{_MONTH_ABBR[due.month - 1]} {due.day}"
    if due.year != today.year:
        label = f"{label}, {due.year}"
    return label


def is_overdue(value: DateLike, today: Optional[date] = None) -> bool:
    due = parse_local_date(value)
    if due is None:
        return False
    return due < _today(today)


def days_until_due(value: DateLike, today: Optional[date] = None) -> Optional[int]:
    """Days until due (negative when past), None without a date."""
    due = parse_local_date(value)
    if due is None:
        return None
    return (due - _today(today)).days


def format_date_for_input(value: DateLike) -> str:
    """YYYY-MM-DD for date inputs, empty string when unset."""
    due = parse_local_date(value)
    return due.isoformat() if due else ""
