"""
gedcom_date.py - Date normalization utilities for GEDCOM processing.

Converts GEDCOM date values into sortable integer codes (YYYYMMDD) and back into
display strings. Input can be a ged4py DateValue or free text. Supported text forms:
    - Bare year ('1929')
    - Day/month/year ('20/7/1929')
    - Month/year ('7/1929')
    - Named month with optional day, English, French or GEDCOM ('20 JUL 1929', 'juillet 1929')
    - ISO ('1929-07-20')
Anything else degrades to the first 4-digit year (January 1st), or no date at all.

Module: gedcom_cache.gedcom_date
Author: @colin0brass
Last updated: 2026-10-19
"""

import re
import logging
from functools import total_ordering
from typing import Any, Optional, Union

from ged4py.date import DateValue

logger = logging.getLogger(__name__)

MONTHS = {
    'janvier': 1, 'january': 1, 'janv': 1, 'jan': 1,
    'février': 2, 'fevrier': 2, 'february': 2, 'févr': 2, 'fév': 2, 'fev': 2, 'feb': 2,
    'mars': 3, 'march': 3, 'mar': 3,
    'avril': 4, 'april': 4, 'avr': 4, 'apr': 4,
    'mai': 5, 'may': 5,
    'juin': 6, 'june': 6, 'jun': 6,
    'juillet': 7, 'july': 7, 'juil': 7, 'jul': 7,
    'août': 8, 'aout': 8, 'august': 8, 'aou': 8, 'aug': 8,
    'septembre': 9, 'september': 9, 'sept': 9, 'sep': 9,
    'octobre': 10, 'october': 10, 'oct': 10,
    'novembre': 11, 'november': 11, 'nov': 11,
    'décembre': 12, 'decembre': 12, 'december': 12, 'déc': 12, 'dec': 12,
}

UNKNOWN_DATES = ('', 'unknown', 'date inconnue', 'inconnue')

YEAR_RE = re.compile(r'^(\d{4})$')
DMY_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
MY_RE = re.compile(r'^(\d{1,2})/(\d{4})$')
ISO_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
NAMED_MONTH_RE = re.compile(
    r'(?:\b(\d{1,2})(?:er|st|nd|rd|th)?\s+)?\b('
    + '|'.join(sorted((re.escape(m) for m in MONTHS), key=len, reverse=True))
    + r')\.?\s+(\d{4})\b'
)
FALLBACK_YEAR_RE = re.compile(r'\b(\d{4})\b')


def _make_code(year: int, month: int = 1, day: int = 1) -> Optional[int]:
    """Build a YYYYMMDD integer, or None if a component is out of range."""
    if not (0 < year <= 9999) or not (1 <= month <= 12) or not (1 <= day <= 31):
        return None
    return year * 10000 + month * 100 + day


def code_from_string(text: str) -> Optional[int]:
    """
    Convert a free-text date into a YYYYMMDD integer.

    Args:
        text (str): Date text.

    Returns:
        Optional[int]: Date code, or None if no year can be found.
    """
    clean = text.strip().lower()
    if clean in UNKNOWN_DATES:
        return None

    m = YEAR_RE.match(clean)
    if m:
        return _make_code(int(m.group(1)))

    m = DMY_RE.match(clean)
    if m:
        code = _make_code(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        if code:
            return code

    m = MY_RE.match(clean)
    if m:
        code = _make_code(int(m.group(2)), int(m.group(1)))
        if code:
            return code

    m = NAMED_MONTH_RE.search(clean)
    if m:
        day = int(m.group(1)) if m.group(1) else 1
        code = _make_code(int(m.group(3)), MONTHS[m.group(2)], day)
        if code is None:
            code = _make_code(int(m.group(3)), MONTHS[m.group(2)])
        if code:
            return code

    m = ISO_RE.match(clean)
    if m:
        code = _make_code(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if code:
            return code

    m = FALLBACK_YEAR_RE.search(clean)
    if m:
        return _make_code(int(m.group(1)))
    logger.debug(f"No year found in date text '{text}'")
    return None


def code_from_date_value(value: Any) -> Optional[int]:
    """
    Convert a ged4py DateValue into a YYYYMMDD integer.

    Ranges and periods use their first bound. Phrases are parsed as free text.
    """
    kind = getattr(value, 'kind', None)
    kind_name = getattr(kind, 'name', None)
    phrase = getattr(value, 'phrase', None)
    if kind_name == 'PHRASE':
        return code_from_string(phrase) if isinstance(phrase, str) else None

    date = getattr(value, 'date', None) or getattr(value, 'date1', None) or getattr(value, 'date2', None)
    if date is None:
        return code_from_string(phrase) if isinstance(phrase, str) else None

    year = getattr(date, 'year', None)
    if not isinstance(year, int):
        return None
    month = getattr(date, 'month', None)
    month_num = MONTHS.get(month.lower()) if isinstance(month, str) else None
    day = getattr(date, 'day', None) or 1
    code = _make_code(year, month_num or 1, day if month_num else 1)
    return code if code else _make_code(year)


def encode_date(value: Union[DateValue, str, int, "GedcomDate", None]) -> Optional[int]:
    """
    Normalize any supported date value to a sortable YYYYMMDD integer.

    Args:
        value: ged4py DateValue, date text, GedcomDate, YYYYMMDD integer or year.

    Returns:
        Optional[int]: Date code, or None.
    """
    if value is None:
        return None
    if isinstance(value, GedcomDate):
        return value.code
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        if 10000101 <= value <= 99991231:
            return value if decode_date(value) else None
        return _make_code(value)
    if isinstance(value, str):
        return code_from_string(value)
    if hasattr(value, 'kind'):
        try:
            return code_from_date_value(value)
        except Exception as e:
            logger.warning(f"Failed to encode date value '{value}': {e}")
            return None
    return code_from_string(str(value))


def decode_date(code: Optional[int]) -> Optional[str]:
    """
    Convert a YYYYMMDD integer into a 'D/M/YYYY' display string.

    Args:
        code (Optional[int]): Date code, e.g. 19290720.

    Returns:
        Optional[str]: Display string, e.g. '20/7/1929', or None if the code is invalid.
    """
    if code is None or isinstance(code, bool):
        return None
    digits = str(code)
    if len(digits) != 8 or not digits.isdigit():
        return None
    year, month, day = int(digits[:4]), int(digits[4:6]), int(digits[6:])
    if not (1 <= month <= 12) or not (1 <= day <= 31):
        return None
    return f"{day}/{month}/{digits[:4]}"


def year_of(code: Optional[int]) -> Optional[int]:
    """Return the year part of a date code."""
    return code // 10000 if code else None


def add_years(code: int, years: int) -> int:
    """Shift a date code by whole calendar years (same month and day)."""
    return code + years * 10000


def date_text(value: Any) -> Optional[str]:
    """Return a printable form of a raw date value."""
    if value is None:
        return None
    if isinstance(value, GedcomDate):
        return date_text(value.original)
    return str(value)


@total_ordering
class GedcomDate:
    """
    Wraps a raw GEDCOM date and exposes its sortable code.

    Attributes:
        original: The original date value (DateValue, str, int or None).
        date: ged4py DateValue parsed from the original when possible.
        code: YYYYMMDD integer, or None.
    """
    __slots__ = [
        'original',
        'date',
        'code'
    ]

    def __init__(self, date: Union[DateValue, str, int, None]):
        self.original = date.original if isinstance(date, GedcomDate) else date
        self.date = self._parse(self.original)
        self.code: Optional[int] = encode_date(self.original)

    def _parse(self, date: Union[DateValue, str, int, None]) -> Optional[DateValue]:
        if date is None or isinstance(date, DateValue):
            return date
        if isinstance(date, str):
            try:
                return DateValue.parse(date)
            except Exception as e:
                logger.debug(f"ged4py could not parse date string '{date}': {e}")
                return None
        return None

    @property
    def kind(self) -> Optional[str]:
        """Kind name of the parsed DateValue ('SIMPLE', 'RANGE', 'PHRASE', ...), if any."""
        kind = getattr(self.date, 'kind', None)
        return getattr(kind, 'name', None)

    @property
    def year_num(self) -> Optional[int]:
        return year_of(self.code)

    @property
    def display(self) -> Optional[str]:
        return decode_date(self.code)

    def __repr__(self) -> str:
        return f"GedcomDate({self.original!r} -> {self.code})"

    def __eq__(self, other):
        if not isinstance(other, GedcomDate):
            return NotImplemented
        return self.code == other.code

    def __lt__(self, other):
        if not isinstance(other, GedcomDate):
            return NotImplemented
        if self.code is None:
            return False  # unknown dates sort last
        if other.code is None:
            return True
        return self.code < other.code

    def __hash__(self):
        return hash(self.code)
