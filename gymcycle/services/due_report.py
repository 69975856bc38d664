"""
Due Report.

Groups members by cycle standing for the dashboard (due today, overdue,
upcoming inside the payment window) and lists upcoming payment reminders.
Every classification goes through the eligibility gate.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from gymcycle.core.config import get_billing_settings
from gymcycle.core.enums import CycleStatusKind
from gymcycle.services.eligibility_gate import (
    CycleStatus,
    EligibilityGate,
    get_eligibility_gate,
)


@dataclass(frozen=True)
class DueEntry:
    """Member row fed into the report."""

    member_id: str
    name: str
    due_date: Optional[date]
    amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class DueItem:
    """A member row with its classified status."""

    entry: DueEntry
    status: CycleStatus


@dataclass
class DueSummary:
    """Members bucketed by standing."""

    due_today: list[DueItem] = field(default_factory=list)
    overdue: list[DueItem] = field(default_factory=list)
    upcoming: list[DueItem] = field(default_factory=list)
    no_due_date: list[DueEntry] = field(default_factory=list)

    @property
    def counts(self) -> dict[str, int]:
        return {
            "due_today": len(self.due_today),
            "overdue": len(self.overdue),
            "upcoming": len(self.upcoming),
            "no_due_date": len(self.no_due_date),
        }

    @property
    def due_today_amount(self) -> Decimal:
        return sum((i.entry.amount for i in self.due_today), Decimal("0"))

    @property
    def overdue_amount(self) -> Decimal:
        return sum((i.entry.amount for i in self.overdue), Decimal("0"))

    @property
    def upcoming_amount(self) -> Decimal:
        return sum((i.entry.amount for i in self.upcoming), Decimal("0"))


class DueReport:
    """Dashboard and reminder views over many cycles."""

    def __init__(self, gate: Optional[EligibilityGate] = None):
        self._gate = gate or get_eligibility_gate()

    def summarize(self, today: date, entries: Iterable[DueEntry]) -> DueSummary:
        """
        Bucket members by standing.

        Upcoming only holds members whose payment window is already open.
        Overdue is ordered most overdue first, the other buckets by due date.
        """
        summary = DueSummary()
        for entry in entries:
            status = self._gate.classify(today, entry.due_date)
            item = DueItem(entry=entry, status=status)
            if status.kind == CycleStatusKind.NO_DUE_DATE:
                summary.no_due_date.append(entry)
            elif status.kind == CycleStatusKind.DUE_TODAY:
                summary.due_today.append(item)
            elif status.kind == CycleStatusKind.OVERDUE:
                summary.overdue.append(item)
            elif self._gate.payment_window_open(status):
                summary.upcoming.append(item)

        summary.overdue.sort(key=lambda i: (-i.status.days_overdue, i.entry.name))
        summary.upcoming.sort(key=lambda i: (i.status.due_date, i.entry.name))
        summary.due_today.sort(key=lambda i: i.entry.name)
        return summary

    def reminders(
        self,
        today: date,
        entries: Iterable[DueEntry],
        days_ahead: Optional[int] = None,
    ) -> list[DueItem]:
        """Members due between today and ``days_ahead`` days from now, inclusive."""
        if days_ahead is None:
            days_ahead = get_billing_settings().REMINDER_DAYS_AHEAD
        horizon = today + timedelta(days=days_ahead)

        items = [
            DueItem(entry=e, status=self._gate.classify(today, e.due_date))
            for e in entries
            if e.due_date is not None and today <= e.due_date <= horizon
        ]
        items.sort(key=lambda i: (i.entry.due_date, i.entry.name))
        return items
