"""
Unit tests for the due report and reminders.
"""

from datetime import date
from decimal import Decimal

import pytest

from gymcycle.services.due_report import DueEntry, DueReport

TODAY = date(2024, 1, 10)


@pytest.fixture
def report(gate):
    return DueReport(gate)


@pytest.fixture
def entries():
    return [
        DueEntry("M-1", "Asha", date(2024, 1, 10), Decimal("1000")),
        DueEntry("M-2", "Bilal", date(2024, 1, 2), Decimal("1000")),
        DueEntry("M-3", "Chen", date(2023, 12, 20), Decimal("2700")),
        DueEntry("M-4", "Dana", date(2024, 1, 13), Decimal("1000")),
        DueEntry("M-5", "Eli", date(2024, 1, 17), Decimal("5000")),
        DueEntry("M-6", "Farah", date(2024, 1, 18), Decimal("1000")),
        DueEntry("M-7", "Gus", None),
    ]


class TestSummarize:
    """Tests for DueReport.summarize."""

    def test_buckets(self, report, entries):
        """Test members land in the right bucket."""
        summary = report.summarize(TODAY, entries)

        assert [i.entry.member_id for i in summary.due_today] == ["M-1"]
        assert [i.entry.member_id for i in summary.overdue] == ["M-3", "M-2"]
        assert [i.entry.member_id for i in summary.upcoming] == ["M-4", "M-5"]
        assert [e.member_id for e in summary.no_due_date] == ["M-7"]

    def test_outside_window_excluded(self, report, entries):
        """Test a member due in 8 days is not listed as upcoming."""
        summary = report.summarize(TODAY, entries)
        assert "M-6" not in [i.entry.member_id for i in summary.upcoming]

    def test_overdue_days(self, report, entries):
        summary = report.summarize(TODAY, entries)
        assert [i.status.days_overdue for i in summary.overdue] == [21, 8]

    def test_amounts(self, report, entries):
        summary = report.summarize(TODAY, entries)
        assert summary.counts == {"due_today": 1, "overdue": 2, "upcoming": 2, "no_due_date": 1}
        assert summary.due_today_amount == Decimal("1000")
        assert summary.overdue_amount == Decimal("3700")
        assert summary.upcoming_amount == Decimal("6000")

    def test_empty(self, report):
        summary = report.summarize(TODAY, [])
        assert summary.overdue == []
        assert summary.overdue_amount == Decimal("0")


class TestReminders:
    """Tests for DueReport.reminders."""

    def test_three_days_ahead(self, report, entries):
        """Test reminders cover today through three days ahead."""
        items = report.reminders(TODAY, entries, days_ahead=3)
        assert [i.entry.member_id for i in items] == ["M-1", "M-4"]

    def test_wider_horizon(self, report, entries):
        items = report.reminders(TODAY, entries, days_ahead=8)
        assert [i.entry.member_id for i in items] == ["M-1", "M-4", "M-5", "M-6"]

    def test_default_horizon_from_settings(self, report, entries, reset_settings, monkeypatch):
        monkeypatch.setenv("BILLING_REMINDER_DAYS_AHEAD", "7")
        items = report.reminders(TODAY, entries)
        assert [i.entry.member_id for i in items] == ["M-1", "M-4", "M-5"]
