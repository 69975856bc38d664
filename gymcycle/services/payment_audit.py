"""
Payment History Audit.

Replays a member's payment history through the due-date rules and compares
the result with the due date stored on the member record, flagging members
whose stored schedule has drifted.

Replay rules:
- payments are applied in (payment_date, created_at) order
- the first payment, or one where the running due date is missing or not
  after the current joining date, projects from the joining date
- every other payment projects from the running due date
- a reactivation on a payment's date moves the joining date (and anchor)
- an anchor shift on a payment's date projects the first payment of that day
  from the shift date and re-anchors on its day
- the history note counts every reactivation event
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from gymcycle.core.enums import MembershipEventType
from gymcycle.services.due_date_calculator import DueDateCalculator, get_due_date_calculator


@dataclass(frozen=True)
class PaymentEntry:
    """One recorded payment."""

    payment_date: date
    created_at: Optional[datetime] = None
    total_months: Optional[int] = None  # Defaults to the member's plan


@dataclass(frozen=True)
class HistoryEvent:
    """Membership history event relevant to the replay."""

    event_type: MembershipEventType
    event_date: date
    new_joining_date: Optional[date] = None
    shift_to_date: Optional[date] = None


@dataclass(frozen=True)
class AuditResult:
    """Stored versus replayed next due date for one member."""

    expected_next_due: Optional[date]
    stored_next_due: Optional[date]
    note: str

    @property
    def is_correct(self) -> bool:
        return self.expected_next_due == self.stored_next_due


class PaymentAuditor:
    """Replays payment histories with the canonical due-date rules."""

    def __init__(self, calculator: Optional[DueDateCalculator] = None):
        self._calculator = calculator or get_due_date_calculator()

    def replay(
        self,
        joining_date: date,
        total_months: int,
        payments: Iterable[PaymentEntry],
        events: Iterable[HistoryEvent] = (),
    ) -> tuple[Optional[date], str]:
        """
        Compute the next due date a payment history should have produced.

        Returns:
            (expected next due date or None, short note describing the history)
        """
        ordered = sorted(
            payments,
            key=lambda p: (p.payment_date, p.created_at is not None, p.created_at or 0),
        )
        if not ordered:
            return None, "No payments"

        events = list(events)
        reactivation_count = sum(
            1 for e in events if e.event_type == MembershipEventType.MEMBER_REACTIVATED
        )
        reactivations = {
            e.event_date: e
            for e in events
            if e.event_type == MembershipEventType.MEMBER_REACTIVATED and e.new_joining_date
        }
        shifts = {
            e.event_date: e
            for e in events
            if e.event_type == MembershipEventType.BASE_DATE_SHIFTED
        }

        current_joining = joining_date
        anchor_day = joining_date.day
        next_due: Optional[date] = None

        for index, payment in enumerate(ordered):
            months = payment.total_months or total_months

            reactivation = reactivations.pop(payment.payment_date, None)
            if reactivation is not None:
                current_joining = reactivation.new_joining_date
                anchor_day = current_joining.day

            # Each event applies to the first payment on its date only
            shift = shifts.pop(payment.payment_date, None)
            if shift is not None:
                start = shift.shift_to_date or payment.payment_date
                anchor_day = start.day
            elif index == 0 or next_due is None or next_due <= current_joining:
                start = current_joining
            else:
                start = next_due

            next_due = self._calculator.project(start, months, anchor_day)

        if reactivation_count:
            note = f"Reactivated {reactivation_count}x"
        elif len(ordered) == 1:
            note = "Single payment"
        else:
            note = f"{len(ordered)} payments"
        return next_due, note

    def audit(
        self,
        stored_next_due: Optional[date],
        joining_date: date,
        total_months: int,
        payments: Iterable[PaymentEntry],
        events: Iterable[HistoryEvent] = (),
    ) -> AuditResult:
        """Compare a stored due date with the replayed one."""
        expected, note = self.replay(joining_date, total_months, payments, events)
        return AuditResult(
            expected_next_due=expected,
            stored_next_due=stored_next_due,
            note=note,
        )
