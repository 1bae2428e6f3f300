from core.metrics_emails import compute_emails_metrics
from core.metrics_overview import compute_overview_metrics
from core.metrics_sales import compute_sales_metrics
from core.metrics_support import compute_support_metrics
from core.models import CallRecord, EmailRecord, KeyCount, TimeSeriesPoint


CALLS = (
    CallRecord(date="2026-02-01", assigned_to="Alice", account_name="Acme", topic="Pricing", outcome="Connected"),
    CallRecord(date="2026-02-02", assigned_to="Bob", account_name="Globex", topic="Renewal", outcome="Voicemail"),
    CallRecord(date="2026-02-02", assigned_to="Alice", account_name="Acme", topic="Pricing", outcome="Connected"),
    CallRecord(date="2026-02-10", assigned_to="Carol", account_name="", topic="", outcome=""),
)

EMAILS = (
    EmailRecord(date="2026-02-01", assigned_to="Alice", company_account="Acme", subject="Proposal", status="Completed"),
    EmailRecord(date="2026-02-03", assigned_to="Dave", company_account="Umbrella", subject="Proposal", status="Open"),
    EmailRecord(date="2026-03-01", assigned_to="Erin", company_account="Acme", subject="Late", status="Open"),
)


class TestOverview:
    def test_totals_and_users(self):
        m = compute_overview_metrics(CALLS, EMAILS, "2026-02-01", "2026-02-28")
        assert m.total_calls == 4
        assert m.total_emails == 2
        assert m.total_activities == 6
        assert m.active_users == 4

    def test_trends(self):
        m = compute_overview_metrics(CALLS, EMAILS, "2026-02-01", "2026-02-28")
        assert m.calls_by_day == [
            TimeSeriesPoint("2026-02-01", 1),
            TimeSeriesPoint("2026-02-02", 2),
            TimeSeriesPoint("2026-02-10", 1),
        ]
        assert m.emails_by_day == [TimeSeriesPoint("2026-02-01", 1), TimeSeriesPoint("2026-02-03", 1)]

    def test_top_accounts_combine_calls_and_emails(self):
        m = compute_overview_metrics(CALLS, EMAILS, "2026-02-01", "2026-02-28")
        assert m.top_accounts[0] == KeyCount("Acme", 3)
        assert {kc.key for kc in m.top_accounts} == {"Acme", "Globex", "Unknown", "Umbrella"}

    def test_average_and_top_performer(self):
        m = compute_overview_metrics(CALLS, EMAILS, "2026-02-01", "2026-02-28")
        # 6 activities over 4 active days
        assert m.avg_daily_activities == 2
        assert m.top_performer == KeyCount("Alice", 3)

    def test_empty_range(self):
        m = compute_overview_metrics(CALLS, EMAILS, "2025-01-01", "2025-01-31")
        assert m.total_activities == 0
        assert m.avg_daily_activities == 0
        assert m.top_performer is None
        assert m.top_accounts == []

    def test_bad_range_uses_everything(self):
        m = compute_overview_metrics(CALLS, EMAILS, "garbage", "2026-02-28")
        assert m.total_activities == 7


class TestSales:
    def test_breakdowns(self):
        m = compute_sales_metrics(CALLS, "2026-02-01", "2026-02-28")
        assert m.calls_by_user == [KeyCount("Alice", 2), KeyCount("Bob", 1), KeyCount("Carol", 1)]
        assert m.calls_by_outcome == [KeyCount("Connected", 2), KeyCount("Voicemail", 1), KeyCount("Unknown", 1)]
        assert m.calls_by_topic[0] == KeyCount("Pricing", 2)
        assert [p.date for p in m.calls_trend] == ["2026-02-01", "2026-02-02", "2026-02-10"]


class TestEmails:
    def test_breakdowns(self):
        m = compute_emails_metrics(EMAILS, "2026-02-01", "2026-03-31")
        assert m.emails_by_status == [KeyCount("Open", 2), KeyCount("Completed", 1)]
        assert m.top_subjects == [KeyCount("Proposal", 2), KeyCount("Late", 1)]
        assert len(m.emails_by_user) == 3

    def test_top_subjects_capped_at_ten(self):
        emails = [EmailRecord(date="2026-02-01", subject=f"S{i}") for i in range(15)]
        assert len(compute_emails_metrics(emails, "2026-02-01", "2026-02-01").top_subjects) == 10


class TestSupport:
    def test_combined_trend_sorted(self):
        m = compute_support_metrics(CALLS, EMAILS, "2026-02-01", "2026-02-28")
        assert m.trend == [
            TimeSeriesPoint("2026-02-01", 2),
            TimeSeriesPoint("2026-02-02", 2),
            TimeSeriesPoint("2026-02-03", 1),
            TimeSeriesPoint("2026-02-10", 1),
        ]

    def test_top_performers(self):
        m = compute_support_metrics(CALLS, EMAILS, "2026-02-01", "2026-02-28")
        assert m.top_performers[0] == KeyCount("Alice", 3)
        assert len(m.top_performers) <= 5
        assert m.emails_by_status == [KeyCount("Completed", 1), KeyCount("Open", 1)]
