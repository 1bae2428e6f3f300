import pytest

from core.kpi import read_uk_kpi
from core.metrics_kpi import (
    attainment,
    attainment_status,
    change_vs_previous,
    compute_kpi_scorecard,
    month_on_month,
)
from core.models import MonthlyValue


class TestAttainment:
    def test_ratio(self):
        assert attainment(45, 50) == pytest.approx(0.9)

    def test_no_target(self):
        assert attainment(45, 0) is None
        assert attainment_status(45, 0) == "no_target"

    def test_inverse(self):
        # lower is better: 5% against a 10% ceiling is twice as good
        assert attainment(5, 10, inverse=True) == pytest.approx(2.0)
        assert attainment(0, 10, inverse=True) == pytest.approx(10000)

    @pytest.mark.parametrize(
        "current,expected",
        [(0, "off_track"), (60, "off_track"), (61, "at_risk"), (90, "at_risk"), (91, "on_track"), (150, "on_track")],
    )
    def test_status_thresholds(self, current, expected):
        assert attainment_status(current, 100) == expected


class TestMonthOnMonth:
    def test_skips_missing_months(self):
        values = [
            MonthlyValue("January", 100.0),
            MonthlyValue("February", None),
            MonthlyValue("March", 150.0),
            MonthlyValue("April", 120.0),
        ]
        assert month_on_month(values) == [
            {"month": "January", "value": 100.0, "change_pct": None},
            {"month": "March", "value": 150.0, "change_pct": 50.0},
            {"month": "April", "value": 120.0, "change_pct": -20.0},
        ]

    def test_zero_previous_has_no_change(self):
        values = [MonthlyValue("January", 0.0), MonthlyValue("February", 10.0)]
        assert month_on_month(values)[1]["change_pct"] is None

    def test_change_vs_previous(self):
        values = [MonthlyValue("January", 200.0), MonthlyValue("February", 250.0)]
        assert change_vs_previous(values, 250.0) == 25.0
        assert change_vs_previous(values[:1], 200.0) is None


class TestScorecard:
    def test_from_workbook(self, paths):
        card = compute_kpi_scorecard(read_uk_kpi(paths.kpi))
        by_metric = {(c["domain"], c["metric"]): c for c in card["cards"]}

        assert len(card["cards"]) == 15
        pipeline = by_metric[("sales", "weekly_pipeline")]
        assert pipeline["current"] == 400
        assert pipeline["status"] == "on_track"
        assert by_metric[("sales", "win_rate")]["status"] == "at_risk"
        assert by_metric[("cross_sell", "opps_created")]["status"] == "no_target"

        ar = by_metric[("finance", "ar_180_plus_pct")]
        assert ar["inverse"] is True
        assert ar["current"] == pytest.approx(0.12)
        assert ar["status"] == "at_risk"

    def test_product_section(self, paths):
        product = compute_kpi_scorecard(read_uk_kpi(paths.kpi))["product"]
        assert product["current_mau"] == 1000
        assert product["change_vs_previous_pct"] == 11.0
        assert [m["month"] for m in product["monthly"]] == ["January", "February"]
