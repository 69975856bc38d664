"""
Due Date Calculator.

Computes the next due date of a membership cycle.

Normal renewal extends from the existing due date, not from the payment
date: a member who pays late keeps the original schedule
(join Nov 1, due Dec 1, paid Dec 7 -> next due Jan 1, not Jan 7).

Shift renewal starts from the shift date, and that date's day-of-month
becomes the new anchor for every later cycle.

Reverting a payment steps the due date back by the same number of months,
keeping the anchor.

In every mode the plan's total months are added (or subtracted) as whole
months and the day-of-month is then clamped to the anchor (anchor 31 -> Feb 28/29, Apr 30).
"""

from dataclasses import dataclass
from datetime import date
from typing import NamedTuple, Optional

from gymcycle.schemas.cycle import MembershipCycle
from gymcycle.schemas.plan import Plan
from gymcycle.services.calendar_math import add_months
from gymcycle.utils.errors import ReversalNotAllowedError


@dataclass(frozen=True)
class ShiftRequest:
    """Explicit request to re-anchor the cycle on ``shift_to_date``."""

    shift_to_date: Optional[date] = None


class DueDateProjection(NamedTuple):
    """Projected due date and the anchor day it was computed with."""

    due_date: date
    anchor_day: int


class DueDateCalculator:
    """Pure due-date projection; every input, including today, is explicit."""

    def project(self, start: date, months: int, anchor_day: int) -> date:
        """Add ``months`` to ``start`` and pin the result to ``anchor_day``."""
        return add_months(start, months, anchor_day)

    def next_due_date(
        self,
        cycle: MembershipCycle,
        plan: Plan,
        today: date,
        shift: Optional[ShiftRequest] = None,
    ) -> DueDateProjection:
        """
        Compute the due date a renewal on ``plan`` moves the cycle to.

        Args:
            cycle: Current cycle state
            plan: Plan being paid for
            today: Evaluation date (used when the cycle has no due date, or
                as the shift date when a shift names none)
            shift: Anchor shift request, None for a normal renewal

        Returns:
            DueDateProjection with the new due date and the anchor day the
            cycle carries afterwards
        """
        if shift is None:
            start = cycle.current_due_date or today
            base_day = cycle.anchor_day
        else:
            start = shift.shift_to_date or today
            base_day = start.day

        return DueDateProjection(
            due_date=self.project(start, plan.total_months, base_day),
            anchor_day=base_day,
        )

    def revert(self, cycle: MembershipCycle, plan: Plan) -> DueDateProjection:
        """
        Undo one renewal on ``plan``: step the due date back by the plan's
        total months, clamped to the cycle's anchor.

        Raises:
            ReversalNotAllowedError: the cycle has no due date
        """
        if cycle.current_due_date is None:
            raise ReversalNotAllowedError("Cycle has no due date to revert")
        return DueDateProjection(
            due_date=self.project(cycle.current_due_date, -plan.total_months, cycle.anchor_day),
            anchor_day=cycle.anchor_day,
        )

    def first_due_date(self, joining_date: date, plan: Plan) -> date:
        """Due date after the first payment made on the joining date."""
        return self.project(joining_date, plan.total_months, joining_date.day)


# =============================================================================
# Singleton Instance
# =============================================================================


_calculator: Optional[DueDateCalculator] = None


def get_due_date_calculator() -> DueDateCalculator:
    """Get singleton due date calculator instance."""
    global _calculator
    if _calculator is None:
        _calculator = DueDateCalculator()
    return _calculator
