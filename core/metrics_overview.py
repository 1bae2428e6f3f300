from __future__ import annotations

from dataclasses import dataclass
from itertools import chain
from typing import List, Optional, Sequence

from core.aggregate import (
    aggregate_by,
    aggregate_by_date,
    distinct_values,
    filter_by_date_range,
    round_half_up,
)
from core.models import CallRecord, EmailRecord, KeyCount, TimeSeriesPoint


TOP_ACCOUNTS_N = 5


@dataclass(frozen=True)
class OverviewMetrics:
    total_activities: int
    total_calls: int
    total_emails: int
    active_users: int
    calls_by_day: List[TimeSeriesPoint]
    emails_by_day: List[TimeSeriesPoint]
    top_accounts: List[KeyCount]
    avg_daily_activities: int = 0
    top_performer: Optional[KeyCount] = None


def compute_overview_metrics(
    calls: Sequence[CallRecord],
    emails: Sequence[EmailRecord],
    start: Optional[str],
    end: Optional[str],
) -> OverviewMetrics:
    calls_in_range = filter_by_date_range(calls, start, end)
    emails_in_range = filter_by_date_range(emails, start, end)
    total_calls = len(calls_in_range)
    total_emails = len(emails_in_range)
    total_activities = total_calls + total_emails

    users = distinct_values(
        (c.assigned_to for c in calls_in_range),
        (e.assigned_to for e in emails_in_range),
    )

    # Calls and emails name the account in different columns.
    accounts = chain((c.account_name for c in calls_in_range), (e.company_account for e in emails_in_range))
    top_accounts = aggregate_by(accounts, lambda name: name)[:TOP_ACCOUNTS_N]

    active_days = distinct_values((c.date for c in calls_in_range), (e.date for e in emails_in_range))
    avg_daily = 0
    if total_activities > 0:
        avg_daily = int(round_half_up(total_activities / max(1, len(active_days))))

    performers = aggregate_by(chain(calls_in_range, emails_in_range), lambda r: r.assigned_to)

    return OverviewMetrics(
        total_activities=total_activities,
        total_calls=total_calls,
        total_emails=total_emails,
        active_users=len(users),
        calls_by_day=aggregate_by_date(calls_in_range),
        emails_by_day=aggregate_by_date(emails_in_range),
        top_accounts=top_accounts,
        avg_daily_activities=avg_daily,
        top_performer=performers[0] if performers else None,
    )
