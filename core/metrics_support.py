from __future__ import annotations

from dataclasses import dataclass
from itertools import chain
from typing import List, Optional, Sequence

from core.aggregate import (
    aggregate_by,
    aggregate_by_date,
    filter_by_date_range,
    merge_daily_counts,
    sort_by_date,
)
from core.models import CallRecord, EmailRecord, KeyCount, TimeSeriesPoint


TOP_PERFORMERS_N = 5


@dataclass(frozen=True)
class SupportMetrics:
    calls_by_outcome: List[KeyCount]
    emails_by_status: List[KeyCount]
    trend: List[TimeSeriesPoint]
    top_performers: List[KeyCount]


def compute_support_metrics(
    calls: Sequence[CallRecord],
    emails: Sequence[EmailRecord],
    start: Optional[str],
    end: Optional[str],
) -> SupportMetrics:
    calls_in_range = filter_by_date_range(calls, start, end)
    emails_in_range = filter_by_date_range(emails, start, end)
    trend = merge_daily_counts(aggregate_by_date(calls_in_range), aggregate_by_date(emails_in_range))
    performers = aggregate_by(chain(calls_in_range, emails_in_range), lambda r: r.assigned_to)
    return SupportMetrics(
        calls_by_outcome=aggregate_by(calls_in_range, lambda c: c.outcome),
        emails_by_status=aggregate_by(emails_in_range, lambda e: e.status),
        trend=sort_by_date(trend),
        top_performers=performers[:TOP_PERFORMERS_N],
    )
