"""Aggregation primitives over loaded activity records.

Everything here is a pure function of its inputs. Record dates are canonical
ISO strings, so lexical order is date order.
"""

from __future__ import annotations

from dataclasses import asdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

import pandas as pd

from core.dates import parse_iso_date, to_iso_date
from core.models import UNKNOWN, KeyCount, TimeSeriesPoint


T = TypeVar("T")


def filter_by_date_range(records: Sequence[T], start: Optional[str], end: Optional[str]) -> List[T]:
    """Records dated within [start, end].

    If either bound does not parse, the input comes back unfiltered.
    """
    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    if start_date is None or end_date is None:
        return list(records)
    lo, hi = to_iso_date(start_date), to_iso_date(end_date)
    return [r for r in records if lo <= r.date <= hi]


def aggregate_by(records: Iterable[T], key_fn: Callable[[T], Optional[str]]) -> List[KeyCount]:
    """Count records per key, largest first. Ties keep first-seen order."""
    keys = pd.Series([key_fn(r) or UNKNOWN for r in records], dtype=object)
    if keys.empty:
        return []
    counts = keys.groupby(keys, sort=False).size().sort_values(ascending=False, kind="stable")
    return [KeyCount(key=str(k), count=int(v)) for k, v in counts.items()]


def aggregate_by_date(records: Iterable[T]) -> List[TimeSeriesPoint]:
    """Count records per day, oldest first."""
    dates = pd.Series([r.date for r in records], dtype=object)
    if dates.empty:
        return []
    counts = dates.groupby(dates, sort=True).size()
    return [TimeSeriesPoint(date=str(d), count=int(c)) for d, c in counts.items()]


def merge_daily_counts(*series: Iterable[TimeSeriesPoint]) -> List[TimeSeriesPoint]:
    """Sum several day series. Output keeps the order in which dates first appear."""
    frame = pd.DataFrame([asdict(p) for s in series for p in s], columns=["date", "count"])
    if frame.empty:
        return []
    merged = frame.groupby("date", sort=False)["count"].sum()
    return [TimeSeriesPoint(date=str(d), count=int(c)) for d, c in merged.items()]


def sort_by_date(points: Iterable[TimeSeriesPoint]) -> List[TimeSeriesPoint]:
    return sorted(points, key=lambda p: p.date)


def distinct_values(*values: Iterable[str]) -> set:
    out = set()
    for vals in values:
        out.update(vals)
    return out


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))
