"""Date recognition.

Patterns are tried in a fixed order and every candidate is validated against
the calendar before it is accepted.  The compact ``DDMMYY`` form is tried last
and only with a plausible day/month so reference numbers are not mistaken
for dates.
"""
from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Callable, Optional, Tuple

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_ORD = r"(?:st|nd|rd|th)?"

ISO_RE = re.compile(r"(?<!\d)(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?!\d)")
DMY_RE = re.compile(r"(?<!\d)(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})(?!\d)")
DAY_MONTH_NAME_RE = re.compile(
    rf"(?<!\d)(\d{{1,2}}){_ORD}[\s\-/]+([A-Za-z]{{3,9}})\.?[\s\-/,]+(\d{{2,4}})(?!\d)"
)
MONTH_NAME_DAY_RE = re.compile(
    rf"\b([A-Za-z]{{3,9}})\.?\s+(\d{{1,2}}){_ORD},?\s+(\d{{2,4}})(?!\d)"
)
COMPACT_NAME_RE = re.compile(r"(?<!\d)(\d{1,2})([A-Za-z]{3,9})(\d{4}|\d{2})(?!\d)")
COMPACT_NUMERIC_RE = re.compile(r"(?<!\d)(\d{2})(\d{2})(\d{2})(?!\d)")


def expand_year(year: int) -> int:
    """Two-digit years pivot at 50."""
    if year < 100:
        return year + (1900 if year >= 50 else 2000)
    return year


def _month_number(token: str) -> Optional[int]:
    return MONTHS.get(token.lower().rstrip("."))


def _build(year: int, month: Optional[int], day: int) -> Optional[date]:
    if not month:
        return None
    try:
        return date(expand_year(year), month, day)
    except ValueError:
        return None


def _from_iso(m: re.Match) -> Optional[date]:
    return _build(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _from_dmy(m: re.Match) -> Optional[date]:
    return _build(int(m.group(3)), int(m.group(2)), int(m.group(1)))


def _from_day_month_name(m: re.Match) -> Optional[date]:
    return _build(int(m.group(3)), _month_number(m.group(2)), int(m.group(1)))


def _from_month_name_day(m: re.Match) -> Optional[date]:
    return _build(int(m.group(3)), _month_number(m.group(1)), int(m.group(2)))


def _from_compact_numeric(m: re.Match) -> Optional[date]:
    day, month = int(m.group(1)), int(m.group(2))
    if not (1 <= day <= 31 and 1 <= month <= 12):
        return None
    return _build(int(m.group(3)), month, day)


DATE_PATTERNS: Tuple[Tuple[str, re.Pattern, Callable[[re.Match], Optional[date]]], ...] = (
    ("iso", ISO_RE, _from_iso),
    ("day_month_year", DMY_RE, _from_dmy),
    ("day_month_name_year", DAY_MONTH_NAME_RE, _from_day_month_name),
    ("month_name_day_year", MONTH_NAME_DAY_RE, _from_month_name_day),
    ("compact_month_name", COMPACT_NAME_RE, _from_day_month_name),
    ("compact_numeric", COMPACT_NUMERIC_RE, _from_compact_numeric),
)


def _relative(text: str, today: date) -> Optional[date]:
    low = text.lower()
    if "yesterday" in low:
        return today - timedelta(days=1)
    if "last week" in low:
        return today - timedelta(days=7)
    if re.search(r"\btoday\b", low):
        return today
    return None


def match_date(text: str) -> Optional[str]:
    """Strict variant: the first valid absolute date in *text*, else ``None``."""
    if not text:
        return None
    for _name, regex, handler in DATE_PATTERNS:
        for m in regex.finditer(text):
            found = handler(m)
            if found:
                return found.isoformat()
    return None


def is_date_token(text: str) -> bool:
    """True when the whole of *text* is one valid date."""
    text = (text or "").strip()
    for _name, regex, handler in DATE_PATTERNS:
        m = regex.fullmatch(text)
        if m and handler(m):
            return True
    return False


def parse_date(text: str, today: Optional[date] = None) -> str:
    """Return the date mentioned in *text* as ``YYYY-MM-DD``.

    Relative phrases are resolved against *today*.  When nothing matches the
    current date is returned instead of failing.
    """
    today = today or date.today()
    text = text or ""
    relative = _relative(text, today)
    if relative:
        return relative.isoformat()
    return match_date(text) or today.isoformat()
