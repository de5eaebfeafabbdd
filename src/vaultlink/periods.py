"""Turn dates into periodic note filenames.

Formats use the moment.js tokens of Obsidian's Periodic Notes plugin:

=========  ===================================  =========================
Token      Meaning                              Periods
=========  ===================================  =========================
``YYYY``   4-digit calendar year                all except weekly
``GGGG``   ISO week-based year                  weekly
``MM``     2-digit month                        daily, monthly, yearly
``DD``     2-digit day                          daily
``WW``     2-digit ISO week number              weekly
``Q``      quarter digit (1-4)                  quarterly
``[..]``   literal text, brackets dropped       all
=========  ===================================  =========================

Daily, monthly and yearly formats are translated to a ``strftime`` pattern.
Weekly and quarterly values have no ``strftime`` equivalent and are
substituted directly.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)

_LITERAL_RE = re.compile(r"\[([^\]]+)\]")
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# Longest first so "MMMM" is not read as "MM" + "MM"
_STRFTIME_TOKENS = [
    ("YYYY", "%Y"),
    ("MMMM", "%B"),
    ("dddd", "%A"),
    ("MMM", "%b"),
    ("ddd", "%a"),
    ("YY", "%y"),
    ("MM", "%m"),
    ("DD", "%d"),
]


class PatternError(ValueError):
    """A date format that cannot be translated."""


def to_strftime(pattern: str, year: int | None = None) -> str:
    """Translate a moment.js style format into a ``strftime`` pattern.

    With ``year`` given, ``YYYY`` is written out as that year padded to four
    digits, since ``%Y`` is not zero-padded on every platform.

    Raises PatternError on unbalanced brackets or on letters outside a
    bracket literal that are not a known token.
    """
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "[":
            close = pattern.find("]", i + 1)
            if close == -1:
                raise PatternError(f"Unclosed literal in {pattern!r}")
            out.append(pattern[i + 1 : close].replace("%", "%%"))
            i = close + 1
            continue
        if ch == "]":
            raise PatternError(f"Unmatched ']' in {pattern!r}")
        if ch.isalpha():
            for token, directive in _STRFTIME_TOKENS:
                if pattern.startswith(token, i):
                    if token == "YYYY" and year is not None:
                        directive = f"{year:04d}"
                    out.append(directive)
                    i += len(token)
                    break
            else:
                raise PatternError(f"Unknown token {ch!r} in {pattern!r}")
            continue
        out.append("%%" if ch == "%" else ch)
        i += 1
    return "".join(out)


def _strftime_or(date: dt.date, fmt: str, fallback: str) -> str:
    try:
        return date.strftime(to_strftime(fmt, year=date.year))
    except ValueError as e:
        logger.debug("Falling back to %r for format %r: %s", fallback, fmt, e)
        return fallback


def format_daily(date: dt.date, fmt: str) -> str:
    return _strftime_or(date, fmt, date.isoformat())


def format_monthly(date: dt.date, fmt: str) -> str:
    return _strftime_or(date, fmt, f"{date.year:04d}-{date.month:02d}")


def format_yearly(date: dt.date, fmt: str) -> str:
    return _strftime_or(date, fmt, f"{date.year:04d}")


def format_weekly(date: dt.date, fmt: str) -> str:
    """ISO-8601 weeks: Monday start, week 1 holds the year's first Thursday."""
    week_year, week, _ = date.isocalendar()
    result = fmt.replace("GGGG", str(week_year)).replace("WW", f"{week:02d}")
    result = _LITERAL_RE.sub(lambda m: m.group(1), result)
    if not result.strip():
        return f"{week_year}-W{week:02d}"
    return result


def quarter_of(date: dt.date) -> int:
    return (date.month - 1) // 3 + 1


def format_quarterly(date: dt.date, fmt: str) -> str:
    quarter = quarter_of(date)
    literals: list[str] = []

    def _stash(match: re.Match) -> str:
        literals.append(match.group(1))
        return f"\x00{len(literals) - 1}\x00"

    result = _LITERAL_RE.sub(_stash, fmt)
    result = result.replace("YYYY", str(date.year)).replace("Q", str(quarter))
    for index, literal in enumerate(literals):
        result = result.replace(f"\x00{index}\x00", literal)

    if not result.strip():
        return f"{date.year}-Q{quarter}"
    return result


class Period(Enum):
    """The five periodic note granularities."""

    DAILY = ("daily", "Daily", "YYYY-MM-DD")
    WEEKLY = ("weekly", "Weekly", "GGGG-[W]WW")
    MONTHLY = ("monthly", "Monthly", "YYYY-MM")
    QUARTERLY = ("quarterly", "Quarterly", "YYYY-[Q]Q")
    YEARLY = ("yearly", "Yearly", "YYYY")

    def __init__(self, key: str, label: str, default_format: str):
        self.key = key
        self.label = label
        self.default_format = default_format

    @classmethod
    def from_key(cls, key: str) -> Period:
        for period in cls:
            if period.key == key.lower():
                return period
        raise ValueError(f"Unknown period: {key!r}")

    def format(self, date: dt.date, fmt: str | None = None) -> str:
        """Filename stem of this period's note for ``date``.

        A missing or blank ``fmt`` uses the period's default format.
        """
        if fmt is None or not fmt.strip():
            fmt = self.default_format
        return _FORMATTERS[self](date, fmt)


_FORMATTERS = {
    Period.DAILY: format_daily,
    Period.WEEKLY: format_weekly,
    Period.MONTHLY: format_monthly,
    Period.QUARTERLY: format_quarterly,
    Period.YEARLY: format_yearly,
}


def format_period(date: dt.date, period: Period, fmt: str | None = None) -> str:
    return period.format(date, fmt)


def parse_iso_date(text: str) -> dt.date | None:
    """Parse a strict ``YYYY-MM-DD`` date, or None if it is not a real date."""
    if not _ISO_DATE_RE.fullmatch(text):
        return None
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        return None
