from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional


UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CallRecord:
    date: str
    activity_type: str = ""
    subject: str = ""
    assigned_to: str = UNKNOWN
    account_name: str = ""
    related_to: str = ""
    topic: str = ""
    outcome: str = ""


@dataclass(frozen=True)
class EmailRecord:
    date: str
    assigned_to: str = UNKNOWN
    activity_type: str = ""
    company_account: str = ""
    opportunity: str = ""
    contact: str = ""
    lead: str = ""
    subject: str = ""
    priority: str = ""
    status: str = ""
    task: str = ""
    task_subtype: str = ""


@dataclass(frozen=True)
class KeyCount:
    key: str
    count: int


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: str
    count: int


@dataclass(frozen=True)
class MonthlyValue:
    """One month of a KPI row. ``value`` None means nothing was recorded."""

    month: str
    value: Optional[float]


def as_dicts(items: Iterable[Any]) -> List[Dict[str, Any]]:
    return [asdict(x) for x in items]
