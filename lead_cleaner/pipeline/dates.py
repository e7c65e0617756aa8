"""Conversion date parsing and date range checks."""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from ..exceptions import InputParseError
from ..models import DateRange


_YEAR_FIRST = re.compile(r"^\d{4}[-/.]")
# pandas resolves these against the current clock
_RELATIVE_KEYWORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def _to_naive_datetime(text: str) -> Optional[datetime]:
    if text.lower() in _RELATIVE_KEYWORDS:
        return None
    # Brazilian exports write DD/MM/YYYY; year-first input stays ISO ordered
    dayfirst = _YEAR_FIRST.match(text) is None
    parsed = pd.to_datetime(text, errors="coerce", dayfirst=dayfirst)
    if parsed is None or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.to_pydatetime()


def parse_conversion_date(text: Optional[str]) -> Optional[datetime]:
    """Parse a ``Data da Conversão`` value, returning ``None`` when it is unusable.

    Day-first text such as ``05/01/2024`` means 5 January. Relative words
    like ``now`` or ``today`` are not dates of a conversion and yield ``None``.
    Offsets such as ``-0300`` are dropped after parsing so every value is
    compared on its local wall-clock time.
    """

    if not text or not text.strip():
        return None
    return _to_naive_datetime(text.strip())


def parse_date_bound(value: Union[str, date, None], *, end: bool = False) -> Optional[date]:
    """Turn user input into a range bound.

    Date-only strings become :class:`datetime.date` bounds (whole-day
    comparison); strings carrying a time of day become ``datetime`` bounds.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    moment = _to_naive_datetime(text)
    if moment is None:
        label = "end" if end else "start"
        raise InputParseError(f"Could not parse date range {label} {text!r}", stage="date", value=text)
    if len(text) <= 10:
        return moment.date()
    return moment


def _before(moment: datetime, bound: date) -> bool:
    if isinstance(bound, datetime):
        return moment < bound.replace(tzinfo=None)
    return moment.date() < bound


def _after(moment: datetime, bound: date) -> bool:
    if isinstance(bound, datetime):
        return moment > bound.replace(tzinfo=None)
    return moment.date() > bound


def in_date_range(moment: Optional[datetime], date_range: DateRange) -> bool:
    """Return whether ``moment`` falls inside the inclusive ``date_range``."""

    if moment is None:
        return False
    if date_range.start is not None and _before(moment, date_range.start):
        return False
    if date_range.end is not None and _after(moment, date_range.end):
        return False
    return True


__all__ = ["parse_conversion_date", "parse_date_bound", "in_date_range"]
