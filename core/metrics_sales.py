from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from core.aggregate import aggregate_by, aggregate_by_date, filter_by_date_range
from core.models import CallRecord, KeyCount, TimeSeriesPoint


@dataclass(frozen=True)
class SalesMetrics:
    calls_by_user: List[KeyCount]
    calls_by_outcome: List[KeyCount]
    calls_by_topic: List[KeyCount]
    calls_trend: List[TimeSeriesPoint]


def compute_sales_metrics(calls: Sequence[CallRecord], start: Optional[str], end: Optional[str]) -> SalesMetrics:
    in_range = filter_by_date_range(calls, start, end)
    return SalesMetrics(
        calls_by_user=aggregate_by(in_range, lambda c: c.assigned_to),
        calls_by_outcome=aggregate_by(in_range, lambda c: c.outcome),
        calls_by_topic=aggregate_by(in_range, lambda c: c.topic),
        calls_trend=aggregate_by_date(in_range),
    )
