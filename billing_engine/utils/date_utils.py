"""Date manipulation utilities: dd/mm/yyyy codec and calendar-month arithmetic"""

import calendar
import re
from datetime import date
from typing import Tuple, Union

from dateutil.relativedelta import relativedelta

from billing_engine.domain.exceptions import InvalidDateFormat

MIN_YEAR = 1900
MAX_YEAR = 2100
THIRTY_DAY_MONTHS = (4, 6, 9, 11)

_DISPLAY_DATE = re.compile(r"(\d{2})/(\d{2})/(\d{4})", re.ASCII)
_NON_DIGIT = re.compile(r"\D", re.ASCII)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _split_display_date(text: str) -> Tuple[int, int, int]:
    """Split dd/mm/yyyy into (day, month, year) and check ranges"""
    match = _DISPLAY_DATE.fullmatch(text) if isinstance(text, str) else None
    if match is None:
        raise InvalidDateFormat(f"Expected dd/mm/yyyy, got {text!r}")

    day, month, year = (int(part) for part in match.groups())

    if not 1 <= day <= 31:
        raise InvalidDateFormat(f"Day out of range in {text!r}")
    if not 1 <= month <= 12:
        raise InvalidDateFormat(f"Month out of range in {text!r}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidDateFormat(f"Year must be between {MIN_YEAR} and {MAX_YEAR} in {text!r}")
    if month in THIRTY_DAY_MONTHS and day > 30:
        raise InvalidDateFormat(f"Month {month} has 30 days: {text!r}")
    if month == 2:
        february_days = 29 if is_leap_year(year) else 28
        if day > february_days:
            raise InvalidDateFormat(f"February {year} has {february_days} days: {text!r}")

    return day, month, year


def parse_display_date(text: str) -> date:
    """Parse a dd/mm/yyyy string into a date, raising InvalidDateFormat when invalid"""
    day, month, year = _split_display_date(text)
    return date(year, month, day)


def is_valid_display_date(text: str) -> bool:
    try:
        _split_display_date(text)
    except InvalidDateFormat:
        return False
    return True


def format_display_date(value: Union[date, str]) -> str:
    """
    Render a date as dd/mm/yyyy.

    Accepts a date or an ISO yyyy-mm-dd string. Text that already contains
    "/" must be a valid dd/mm/yyyy date and is returned unchanged.
    """
    if isinstance(value, str):
        if "/" in value:
            _split_display_date(value)
            return value
        try:
            value = date.fromisoformat(value[:10])
        except ValueError as e:
            raise InvalidDateFormat(f"Expected yyyy-mm-dd, got {value!r}") from e

    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def display_to_iso(text: str) -> str:
    """dd/mm/yyyy → yyyy-mm-dd"""
    return parse_display_date(text).isoformat()


def iso_to_display(text: str) -> str:
    """yyyy-mm-dd → dd/mm/yyyy"""
    return format_display_date(text)


def mask_date_input(text: str) -> str:
    """Apply the dd/mm/yyyy typing mask to whatever digits were entered"""
    digits = _NON_DIGIT.sub("", text or "")[:8]
    if len(digits) <= 2:
        return digits
    if len(digits) <= 4:
        return f"{digits[:2]}/{digits[2:]}"
    return f"{digits[:2]}/{digits[2:4]}/{digits[4:]}"


def add_months(start: date, months: int) -> date:
    """Shift by calendar months, clamping to the last day of shorter months"""
    return start + relativedelta(months=months)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> Tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1
