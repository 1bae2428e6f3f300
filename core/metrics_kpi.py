from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from core.aggregate import round_half_up
from core.kpi import UKKpiData
from core.models import MonthlyValue


OFF_TRACK_RATIO = 0.6
AT_RISK_RATIO = 0.9


@dataclass(frozen=True)
class KpiCard:
    domain: str
    metric: str
    current: float
    target: float
    stretch: float
    attainment: Optional[float]
    status: str
    inverse: bool = False


def attainment(current: float, target: float, *, inverse: bool = False) -> Optional[float]:
    """current/target, or target/current for lower-is-better metrics. None without a target."""
    if not target:
        return None
    if inverse:
        return target / max(current, 0.001)
    return current / target


def attainment_status(current: float, target: float, *, inverse: bool = False) -> str:
    ratio = attainment(current, target, inverse=inverse)
    if ratio is None:
        return "no_target"
    if ratio <= OFF_TRACK_RATIO:
        return "off_track"
    if ratio <= AT_RISK_RATIO:
        return "at_risk"
    return "on_track"


def non_null(values: Iterable[MonthlyValue]) -> List[MonthlyValue]:
    return [m for m in values if m.value is not None]


def _pct_change(prev: Optional[float], value: Optional[float]) -> Optional[float]:
    if not prev or not value:
        return None
    return round_half_up((value - prev) / prev * 100)


def month_on_month(values: Iterable[MonthlyValue]) -> List[Dict[str, Any]]:
    """Percent change between consecutive recorded months. Months without data are skipped."""
    rows: List[Dict[str, Any]] = []
    prev: Optional[float] = None
    for m in non_null(values):
        rows.append({"month": m.month, "value": m.value, "change_pct": _pct_change(prev, m.value)})
        prev = m.value
    return rows


def change_vs_previous(values: Iterable[MonthlyValue], current: float) -> Optional[float]:
    """Percent change of ``current`` against the second-latest recorded month."""
    recorded = non_null(values)
    if len(recorded) < 2:
        return None
    return _pct_change(recorded[-2].value, current)


def _card(domain: str, metric: str, current: float, target: float, stretch: float = 0.0, inverse: bool = False) -> KpiCard:
    return KpiCard(
        domain=domain,
        metric=metric,
        current=current,
        target=target,
        stretch=stretch,
        attainment=attainment(current, target, inverse=inverse),
        status=attainment_status(current, target, inverse=inverse),
        inverse=inverse,
    )


def compute_kpi_scorecard(data: UKKpiData) -> Dict[str, Any]:
    s, cs, r, cm, f, p = (
        data.sales,
        data.cross_sell,
        data.retention,
        data.customer_management,
        data.finance,
        data.product,
    )
    cards = [
        _card("sales", "weekly_pipeline", s.current_week_total_pipeline, s.pipeline_weekly_target, s.pipeline_monthly_target),
        _card("sales", "win_rate", s.current_week_win_rate, s.win_rate_target, s.win_rate_stretch),
        _card("sales", "asp", s.current_week_asp, s.asp_target, s.asp_stretch),
        _card("cross_sell", "daily_sales_activity", cs.current_activity, cs.activity_target),
        _card("cross_sell", "opps_created", cs.current_opps_created, cs.opps_target),
        _card("retention", "proactive_cases", r.current_proactive_cases, r.proactive_cases_target, r.proactive_cases_stretch),
        _card("retention", "high_value_comms", r.current_high_value_comms, r.high_value_comms_target, r.high_value_comms_stretch),
        _card("retention", "converted_leads", r.current_converted_leads, r.converted_leads_target, r.converted_leads_stretch),
        _card("retention", "cross_sell_leads", r.current_cross_sell_leads, r.cross_sell_leads_target, r.cross_sell_leads_stretch),
        _card("customer_management", "inbound_cases", cm.current_inbound_cases, cm.inbound_target, cm.inbound_stretch),
        _card("customer_management", "resolved_in_24h", cm.current_resolved_in_24h, cm.resolved_target, cm.resolved_stretch),
        _card("customer_management", "customer_comms", cm.current_customer_comms, cm.comms_target, cm.comms_stretch),
        _card("customer_management", "converted_leads", cm.current_converted_leads, cm.converted_leads_target, cm.converted_leads_stretch),
        _card("finance", "ar_180_plus_pct", f.current_180_plus_pct, f.ar_180_pct_target, f.ar_180_pct_stretch, inverse=True),
        _card("finance", "ar_90_plus_pct", f.current_90_plus_pct, f.ar_90_pct_target, f.ar_90_pct_stretch, inverse=True),
    ]
    return {
        "cards": [asdict(c) for c in cards],
        "product": {
            "current_mau": p.current_mau,
            "change_vs_previous_pct": change_vs_previous(p.app_usage_mau, p.current_mau),
            "monthly": month_on_month(p.app_usage_mau),
        },
    }
