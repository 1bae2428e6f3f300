from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from core.dates import parse_iso_date, to_iso_date


@dataclass(frozen=True)
class DateRange:
    start: str = ""
    end: str = ""


def available_date_bounds(*record_sets: Iterable[object]) -> Tuple[Optional[str], Optional[str]]:
    """Earliest and latest ISO date across record sets (None when there is no data)."""
    dates = [r.date for records in record_sets for r in records if getattr(r, "date", "")]
    if not dates:
        return None, None
    return min(dates), max(dates)


def resolve_date_range(
    raw_from: Optional[str],
    raw_to: Optional[str],
    *,
    bounds: Sequence[Optional[str]] = (None, None),
) -> DateRange:
    """Normalize query-string dates.

    Missing values default to the data bounds; unparsable or inverted ranges
    are replaced by the full available range instead of erroring.
    """
    min_date, max_date = bounds[0] or "", bounds[1] or ""
    start = (raw_from or "").strip() or min_date
    end = (raw_to or "").strip() or max_date

    start_parsed = parse_iso_date(start)
    end_parsed = parse_iso_date(end)
    if start_parsed is None or end_parsed is None or start_parsed > end_parsed:
        return DateRange(start=min_date, end=max_date)
    return DateRange(start=to_iso_date(start_parsed), end=to_iso_date(end_parsed))
