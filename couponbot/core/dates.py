"""
Date normalization for coupon validity windows.

All stored validity dates use the canonical dd/mm/yyyy format. Slash dates
are always read day first on the write path; the month first reading is only
used by format_for_display() for legacy used dates.
"""
import re
from datetime import date, datetime, timedelta
from typing import Union

import pandas as pd

from couponbot.core.errors import InvalidDateError
from couponbot.core.i18n import translate

# Serial day 25569 is 1970-01-01 in the 1900 spreadsheet date system
SERIAL_EPOCH = date(1899, 12, 30)
SERIAL_UNIX_START = 25569

SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def _as_serial(value):
    """Returns the serial day count, or None if value is not a serial date."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if number != number or number <= SERIAL_UNIX_START:  # NaN or too small
        return None
    return number


def serial_to_date(serial: float) -> date:
    """Converts a spreadsheet serial day count (time of day dropped)."""
    return SERIAL_EPOCH + timedelta(days=int(serial))


def _parse_day_first(text: str, match) -> date:
    day, month, year = (int(group) for group in match.groups())
    if not 1 <= month <= 12 or not 1 <= day <= 31 or not 1900 <= year <= 2100:
        raise InvalidDateError(text)
    try:
        # Rejects 31/02 and friends
        return date(year, month, day)
    except ValueError:
        raise InvalidDateError(text)


def parse_flexible_date(value: Union[str, int, float, date]) -> date:
    """
    Parses a date in any supported representation.

    Order: spreadsheet serial number, dd/mm/yyyy, yyyy-mm-dd, then generic
    parsing. Raises InvalidDateError when nothing matches.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    serial = _as_serial(value)
    if serial is not None:
        try:
            return serial_to_date(serial)
        except OverflowError:
            raise InvalidDateError(value)

    text = str(value).strip()
    if not text:
        raise InvalidDateError(value)

    match = SLASH_DATE.match(text)
    if match:
        return _parse_day_first(text, match)

    # Impossible ISO dates (2024-02-30) are rejected, not rolled over
    match = ISO_DATE.match(text)
    if match:
        year, month, day = (int(group) for group in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            raise InvalidDateError(text)

    # pandas reads "now" and "today" as the current date
    if not any(char.isdigit() for char in text):
        raise InvalidDateError(text)

    try:
        parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        raise InvalidDateError(text)
    if pd.isna(parsed):
        raise InvalidDateError(text)
    return parsed.date()


def format_canonical(value: date) -> str:
    """Renders dd/mm/yyyy, zero padded."""
    return f"{value.day:02d}/{value.month:02d}/{value.year}"


def format_long(value: date) -> str:
    """Human readable form stored as used date, e.g. "June 15, 2024"."""
    return f"{value:%B} {value.day}, {value.year}"


def format_for_display(text: str) -> str:
    """
    Best effort dd/mm/yyyy rendering of a stored date for display.

    Never raises: unreadable input is returned unchanged.
    """
    if not text or not str(text).strip():
        return translate("unknown")

    text = str(text).strip()
    try:
        return format_canonical(parse_flexible_date(text))
    except InvalidDateError:
        pass

    # Legacy data written month first
    match = SLASH_DATE.match(text)
    if match:
        month, day, year = (int(group) for group in match.groups())
        try:
            return format_canonical(date(year, month, day))
        except ValueError:
            pass

    return text


def day_bounds(value: date):
    """Start and inclusive end of a calendar day."""
    start = datetime.combine(value, datetime.min.time())
    return start, datetime.combine(value, datetime.max.time())
