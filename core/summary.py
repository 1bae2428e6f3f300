"""Condensed activity digest for the external insight generator.

Only aggregates leave this module; raw records never do.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence

from core.aggregate import merge_daily_counts, sort_by_date
from core.dates import format_human_date, parse_iso_date
from core.metrics_emails import compute_emails_metrics
from core.metrics_overview import compute_overview_metrics
from core.metrics_sales import compute_sales_metrics
from core.models import CallRecord, EmailRecord, TimeSeriesPoint, as_dicts


TOP_BREAKDOWN_N = 3
STATUS_BREAKDOWN_N = 5


def trend_extremes(points: List[TimeSeriesPoint]) -> Dict[str, Optional[Dict[str, Any]]]:
    """Lowest and highest day of a merged trend.

    Points are stable-sorted by count ascending: the lowest day is the first
    entry, the highest day the last.
    """
    if not points:
        return {"highest_day": None, "lowest_day": None}
    ranked = sorted(points, key=lambda p: p.count)
    return {"highest_day": asdict(ranked[-1]), "lowest_day": asdict(ranked[0])}


def _period(start: Optional[str], end: Optional[str]) -> Dict[str, Optional[str]]:
    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    label = None
    if start_date is not None and end_date is not None:
        label = f"{format_human_date(start_date)} to {format_human_date(end_date)}"
    return {"from": start, "to": end, "label": label}


def build_executive_summary(
    calls: Sequence[CallRecord],
    emails: Sequence[EmailRecord],
    start: Optional[str],
    end: Optional[str],
) -> Dict[str, Any]:
    overview = compute_overview_metrics(calls, emails, start, end)
    sales = compute_sales_metrics(calls, start, end)
    emails_metrics = compute_emails_metrics(emails, start, end)

    combined = merge_daily_counts(overview.calls_by_day, overview.emails_by_day)

    return {
        "period": _period(start, end),
        "totals": {
            "activities": overview.total_activities,
            "calls": overview.total_calls,
            "emails": overview.total_emails,
            "active_users": overview.active_users,
        },
        "top_assigned_to_calls": as_dicts(sales.calls_by_user[:TOP_BREAKDOWN_N]),
        "top_assigned_to_emails": as_dicts(emails_metrics.emails_by_user[:TOP_BREAKDOWN_N]),
        "top_topics": as_dicts(sales.calls_by_topic[:TOP_BREAKDOWN_N]),
        "top_outcomes": as_dicts(sales.calls_by_outcome[:TOP_BREAKDOWN_N]),
        "status_distribution": as_dicts(emails_metrics.emails_by_status[:STATUS_BREAKDOWN_N]),
        "daily_trend": as_dicts(sort_by_date(combined)),
        "trend_highlights": trend_extremes(combined),
    }
