from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from core.aggregate import aggregate_by, aggregate_by_date, filter_by_date_range
from core.models import EmailRecord, KeyCount, TimeSeriesPoint


TOP_SUBJECTS_N = 10


@dataclass(frozen=True)
class EmailsMetrics:
    emails_by_user: List[KeyCount]
    emails_by_status: List[KeyCount]
    emails_trend: List[TimeSeriesPoint]
    top_subjects: List[KeyCount]


def compute_emails_metrics(emails: Sequence[EmailRecord], start: Optional[str], end: Optional[str]) -> EmailsMetrics:
    in_range = filter_by_date_range(emails, start, end)
    return EmailsMetrics(
        emails_by_user=aggregate_by(in_range, lambda e: e.assigned_to),
        emails_by_status=aggregate_by(in_range, lambda e: e.status),
        emails_trend=aggregate_by_date(in_range),
        top_subjects=aggregate_by(in_range, lambda e: e.subject)[:TOP_SUBJECTS_N],
    )
