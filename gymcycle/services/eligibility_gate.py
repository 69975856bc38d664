"""
Eligibility Gate.

Classifies a cycle's standing from (today, due date) and derives which
operations are legal in that standing:

    no due date      -> payable, deactivatable
    upcoming (n)     -> payable when n <= window (7 days), not deactivatable
    due today        -> payable, deactivatable
    overdue (n)      -> payable, deactivatable

Comparisons are on calendar dates only.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from gymcycle.core.config import get_billing_settings
from gymcycle.core.enums import CycleStatusKind
from gymcycle.services.calendar_math import DateLike, as_date, whole_days_between


@dataclass(frozen=True)
class CycleStatus:
    """Standing of a cycle on a given day."""

    kind: CycleStatusKind
    due_date: Optional[date] = None
    days_left: Optional[int] = None
    days_overdue: Optional[int] = None

    @property
    def is_overdue(self) -> bool:
        return self.kind == CycleStatusKind.OVERDUE

    @property
    def is_due_today(self) -> bool:
        return self.kind == CycleStatusKind.DUE_TODAY

    @property
    def has_lapsed(self) -> bool:
        """Due date reached or passed."""
        return self.kind in (CycleStatusKind.DUE_TODAY, CycleStatusKind.OVERDUE)


@dataclass(frozen=True)
class EligibilityPolicy:
    """Policy thresholds, kept apart from the date math."""

    payment_window_days: int = 7

    @classmethod
    def from_settings(cls) -> "EligibilityPolicy":
        settings = get_billing_settings()
        return cls(payment_window_days=settings.PAYMENT_WINDOW_DAYS)


@dataclass(frozen=True)
class Eligibility:
    """Cycle status plus the operation gates derived from it."""

    status: CycleStatus
    payment_window_open: bool
    days_until_window_opens: int
    deactivation_allowed: bool


class EligibilityGate:
    """Pure classification of cycle standing."""

    def __init__(self, policy: Optional[EligibilityPolicy] = None):
        self._policy = policy or EligibilityPolicy.from_settings()

    @property
    def policy(self) -> EligibilityPolicy:
        return self._policy

    def classify(self, today: DateLike, due_date: Optional[DateLike]) -> CycleStatus:
        """Classify the cycle standing on ``today``."""
        if due_date is None:
            return CycleStatus(kind=CycleStatusKind.NO_DUE_DATE)

        due = as_date(due_date)
        days = whole_days_between(today, due)

        if days > 0:
            return CycleStatus(kind=CycleStatusKind.UPCOMING, due_date=due, days_left=days)
        if days == 0:
            return CycleStatus(kind=CycleStatusKind.DUE_TODAY, due_date=due, days_left=0)
        return CycleStatus(kind=CycleStatusKind.OVERDUE, due_date=due, days_overdue=-days)

    def payment_window_open(self, status: CycleStatus) -> bool:
        """Whether a renewal payment may be recorded."""
        if status.kind != CycleStatusKind.UPCOMING:
            return True
        return status.days_left <= self._policy.payment_window_days

    def days_until_window_opens(self, status: CycleStatus) -> int:
        if self.payment_window_open(status):
            return 0
        return status.days_left - self._policy.payment_window_days

    def deactivation_allowed(self, status: CycleStatus) -> bool:
        """An active member may be deactivated only once the cycle has lapsed."""
        return status.kind == CycleStatusKind.NO_DUE_DATE or status.has_lapsed

    def evaluate(self, today: DateLike, due_date: Optional[DateLike]) -> Eligibility:
        """Classify and derive every gate in one call."""
        status = self.classify(today, due_date)
        return Eligibility(
            status=status,
            payment_window_open=self.payment_window_open(status),
            days_until_window_opens=self.days_until_window_opens(status),
            deactivation_allowed=self.deactivation_allowed(status),
        )


# =============================================================================
# Calling-layer Helpers
# =============================================================================


def classify_cycle(today: DateLike, due_date: Optional[DateLike]) -> CycleStatus:
    """Classify a cycle with the configured policy."""
    return get_eligibility_gate().classify(today, due_date)


def can_open_payment_flow(today: DateLike, due_date: Optional[DateLike]) -> bool:
    gate = get_eligibility_gate()
    return gate.payment_window_open(gate.classify(today, due_date))


def can_deactivate(today: DateLike, due_date: Optional[DateLike]) -> bool:
    gate = get_eligibility_gate()
    return gate.deactivation_allowed(gate.classify(today, due_date))


def get_status_display_name(status: CycleStatus) -> str:
    """Get human-readable status label."""
    if status.kind == CycleStatusKind.NO_DUE_DATE:
        return "No due date"
    if status.kind == CycleStatusKind.DUE_TODAY:
        return "Due today"
    if status.kind == CycleStatusKind.OVERDUE:
        return f"Overdue by {status.days_overdue} day{'s' if status.days_overdue != 1 else ''}"
    return f"Due in {status.days_left} day{'s' if status.days_left != 1 else ''}"


# =============================================================================
# Singleton Instance
# =============================================================================


_gate: Optional[EligibilityGate] = None


def get_eligibility_gate() -> EligibilityGate:
    """Get singleton eligibility gate instance."""
    global _gate
    if _gate is None:
        _gate = EligibilityGate()
    return _gate
