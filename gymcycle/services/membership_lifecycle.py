"""
Membership Lifecycle.

Guarded deactivate -> reactivate transitions, and payment reversal.

A member can be deactivated only once the current cycle has lapsed, so paid
time is never taken away. Reactivation starts a new cycle epoch anchored on
the rejoin date; nothing from the lapsed cycle carries over.

Deleting a renewal payment steps the due date back by the plan's months
and re-derives the member's status from the reverted date.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from gymcycle.core.config import get_billing_settings
from gymcycle.core.enums import MemberStatus, PaymentMethod
from gymcycle.schemas.commands import (
    DeactivationCommand,
    ReactivationCommand,
    ReversalCommand,
)
from gymcycle.schemas.cycle import MembershipCycle
from gymcycle.schemas.plan import Plan
from gymcycle.services.adapters.base import (
    DeactivationSink,
    PaymentReverser,
    ReactivationSink,
)
from gymcycle.services.due_date_calculator import DueDateCalculator, get_due_date_calculator
from gymcycle.services.eligibility_gate import EligibilityGate, get_eligibility_gate
from gymcycle.services.plan_catalog import legacy_category
from gymcycle.utils.errors import (
    AlreadyActiveError,
    AlreadyInactiveError,
    DeactivationNotAllowedError,
    InvalidStartDateError,
    PersistenceError,
)

logger = logging.getLogger(__name__)


class MembershipLifecycle:
    """Deactivation, reactivation and payment reversal rules."""

    def __init__(
        self,
        gate: Optional[EligibilityGate] = None,
        calculator: Optional[DueDateCalculator] = None,
        max_backdate_days: Optional[int] = None,
    ):
        self._gate = gate or get_eligibility_gate()
        self._calculator = calculator or get_due_date_calculator()
        if max_backdate_days is None:
            max_backdate_days = get_billing_settings().REJOIN_MAX_BACKDATE_DAYS
        self._max_backdate_days = max_backdate_days

    def new_member_cycle(
        self,
        joining_date: date,
        plan: Optional[Plan] = None,
    ) -> MembershipCycle:
        """
        Cycle for a newly created member.

        Without a plan the cycle has no due date yet; with one, the first
        payment on the joining date sets the first due date.
        """
        due_date = self._calculator.first_due_date(joining_date, plan) if plan else None
        return MembershipCycle(
            anchor_day=joining_date.day,
            current_due_date=due_date,
            joining_date=joining_date,
        )

    def deactivate(
        self,
        member_id: str,
        cycle: MembershipCycle,
        currently_active: bool,
        today: date,
    ) -> DeactivationCommand:
        """
        Build the command that marks a member inactive.

        Raises:
            AlreadyInactiveError: member is not active
            DeactivationNotAllowedError: the cycle still has paid time left
        """
        if not currently_active:
            raise AlreadyInactiveError(f"Member {member_id} is already inactive")

        status = self._gate.classify(today, cycle.current_due_date)
        if not self._gate.deactivation_allowed(status):
            logger.warning(
                f"Deactivation refused for member {member_id}: "
                f"{status.days_left} paid day(s) left"
            )
            raise DeactivationNotAllowedError(status.days_left, status.due_date)

        return DeactivationCommand(
            member_id=member_id,
            effective_date=today,
            last_due_date=cycle.current_due_date,
        )

    def reactivate(
        self,
        member_id: str,
        currently_active: bool,
        plan: Plan,
        amount: Decimal,
        method: PaymentMethod,
        start_date: date,
        today: date,
    ) -> ReactivationCommand:
        """
        Build the command that starts a new cycle epoch for a returning member.

        The start date may be back-dated by at most the configured number of
        days and may not lie in the future.

        Raises:
            AlreadyActiveError: member is still active
            InvalidStartDateError: start date outside the allowed range
        """
        if currently_active:
            raise AlreadyActiveError(f"Member {member_id} is already active")

        earliest = today - timedelta(days=self._max_backdate_days)
        if start_date > today:
            raise InvalidStartDateError(
                f"Start date {start_date.isoformat()} is in the future"
            )
        if start_date < earliest:
            raise InvalidStartDateError(
                f"Start date {start_date.isoformat()} is more than "
                f"{self._max_backdate_days} days in the past"
            )

        fresh = MembershipCycle(anchor_day=start_date.day, joining_date=start_date)
        projection = self._calculator.next_due_date(fresh, plan, today=start_date)

        return ReactivationCommand(
            member_id=member_id,
            plan_id=plan.id,
            plan_name=plan.name,
            amount=amount,
            method=method,
            start_date=start_date,
            cycle=fresh.renewed(projection.due_date, projection.anchor_day),
            legacy_category=legacy_category(plan.total_months),
        )

    def reverse_payment(
        self,
        member_id: str,
        cycle: MembershipCycle,
        plan: Plan,
        amount: Decimal,
        payment_command_id: str,
        today: date,
    ) -> ReversalCommand:
        """
        Build the command that deletes a renewal payment.

        The due date steps back by the plan's total months on the same anchor.
        The member stays active unless the reverted due date has already
        passed on ``today``.

        Raises:
            ReversalNotAllowedError: the cycle has no due date
        """
        projection = self._calculator.revert(cycle, plan)
        status = self._gate.classify(today, projection.due_date)
        new_status = MemberStatus.INACTIVE if status.is_overdue else MemberStatus.ACTIVE

        return ReversalCommand(
            member_id=member_id,
            payment_command_id=payment_command_id,
            plan_id=plan.id,
            total_months=plan.total_months,
            amount=amount,
            expected_due_date=cycle.current_due_date,
            cycle=cycle.renewed(projection.due_date, projection.anchor_day),
            status=new_status,
        )

    async def apply_deactivation(
        self,
        sink: DeactivationSink,
        command: DeactivationCommand,
    ) -> None:
        """Send a deactivation to its sink; failures surface as PersistenceError."""
        try:
            await sink.apply(command)
        except PersistenceError as e:
            logger.error(f"Deactivation {command.command_id} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Deactivation {command.command_id} failed: {e}")
            raise PersistenceError.wrap(e) from e
        logger.info(f"Member {command.member_id} deactivated on {command.effective_date.isoformat()}")

    async def apply_reactivation(
        self,
        sink: ReactivationSink,
        command: ReactivationCommand,
    ) -> None:
        """Send a reactivation to its sink; failures surface as PersistenceError."""
        try:
            await sink.apply(command)
        except PersistenceError as e:
            logger.error(f"Reactivation {command.command_id} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Reactivation {command.command_id} failed: {e}")
            raise PersistenceError.wrap(e) from e
        logger.info(
            f"Member {command.member_id} reactivated from {command.start_date.isoformat()}, "
            f"next due {command.cycle.current_due_date.isoformat()}"
        )

    async def apply_reversal(
        self,
        reverser: PaymentReverser,
        command: ReversalCommand,
    ) -> None:
        """Send a payment reversal to its port; failures surface as PersistenceError."""
        try:
            await reverser.revert(command)
        except PersistenceError as e:
            logger.error(f"Reversal {command.command_id} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Reversal {command.command_id} failed: {e}")
            raise PersistenceError.wrap(e) from e
        logger.info(
            f"Payment {command.payment_command_id} reversed for member {command.member_id}, "
            f"due date back to {command.reverted_due_date.isoformat()} ({command.status.value})"
        )


# =============================================================================
# Singleton Instance
# =============================================================================


_lifecycle: Optional[MembershipLifecycle] = None


def get_membership_lifecycle() -> MembershipLifecycle:
    """Get singleton membership lifecycle instance."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = MembershipLifecycle()
    return _lifecycle
