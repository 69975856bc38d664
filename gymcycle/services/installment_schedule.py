"""
Installment Schedule.

Splits a plan price into N installments and tracks them:

    split     -> every installment gets total / N rounded down to cents,
                 the last one takes the remainder
    due dates -> first payment date + (n - 1) * frequency_days
    standing  -> classified through the eligibility gate, so an installment
                 is overdue exactly when a cycle with that due date would be

Installment 1 is collected when the schedule is built. Cancelling waives
every unpaid installment.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, Optional

from gymcycle.core.categories import legacy_category
from gymcycle.core.config import get_billing_settings
from gymcycle.core.enums import InstallmentPlanStatus, InstallmentStatus, PaymentMethod
from gymcycle.schemas.installment import Installment, InstallmentPlan
from gymcycle.schemas.plan import Plan
from gymcycle.services.eligibility_gate import (
    CycleStatus,
    EligibilityGate,
    get_eligibility_gate,
)
from gymcycle.utils.errors import (
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InstallmentPlanClosedError,
    InvalidInstallmentPlanError,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def split_amount(total: Decimal, num_installments: int) -> list[Decimal]:
    """
    Split ``total`` into ``num_installments`` cent amounts summing to ``total``.

    1000 over 3 installments -> 333.33, 333.33, 333.34
    """
    if num_installments < 1:
        raise InvalidInstallmentPlanError("At least one installment is required")
    total = Decimal(total).quantize(CENT)
    base = (total / num_installments).quantize(CENT, rounding=ROUND_DOWN)
    last = total - base * (num_installments - 1)
    return [base] * (num_installments - 1) + [last]


@dataclass(frozen=True)
class InstallmentDue:
    """An open installment with its standing on the evaluation day."""

    schedule: InstallmentPlan
    installment: Installment
    status: CycleStatus

    @property
    def days_overdue(self) -> int:
        return self.status.days_overdue or 0

    @property
    def days_left(self) -> int:
        return self.status.days_left or 0


class InstallmentScheduler:
    """Builds installment schedules and moves installments through their states."""

    def __init__(self, gate: Optional[EligibilityGate] = None):
        self._gate = gate or get_eligibility_gate()

    def build(
        self,
        member_id: str,
        plan: Plan,
        num_installments: int,
        first_payment_date: date,
        first_payment_method: PaymentMethod,
        total_amount: Optional[Decimal] = None,
        frequency_days: Optional[int] = None,
    ) -> InstallmentPlan:
        """
        Build a schedule with installment 1 already paid.

        Args:
            member_id: Member buying the plan
            plan: Plan being bought; its total months give the legacy category
            num_installments: Number of installments, at least 2
            first_payment_date: Date installment 1 is collected
            first_payment_method: How installment 1 was paid
            total_amount: Amount to split, defaults to the plan price
            frequency_days: Days between due dates, defaults to settings

        Raises:
            InvalidInstallmentPlanError: Fewer than 2 installments, a
                non-positive amount or a non-positive frequency
        """
        if frequency_days is None:
            frequency_days = get_billing_settings().INSTALLMENT_FREQUENCY_DAYS
        total = plan.price_amount if total_amount is None else Decimal(total_amount)

        if num_installments < 2:
            raise InvalidInstallmentPlanError("An installment plan needs at least 2 installments")
        if total <= 0:
            raise InvalidInstallmentPlanError(f"Installment total must be positive, got {total}")
        if frequency_days < 1:
            raise InvalidInstallmentPlanError(
                f"Installment frequency must be at least 1 day, got {frequency_days}"
            )

        amounts = split_amount(total, num_installments)
        installments = []
        for number, amount in enumerate(amounts, start=1):
            due = first_payment_date + timedelta(days=(number - 1) * frequency_days)
            if number == 1:
                installments.append(
                    Installment(
                        number=number,
                        amount=amount,
                        due_date=due,
                        status=InstallmentStatus.PAID,
                        paid_date=first_payment_date,
                        payment_method=first_payment_method,
                    )
                )
            else:
                installments.append(Installment(number=number, amount=amount, due_date=due))

        schedule = InstallmentPlan(
            member_id=member_id,
            plan_id=plan.id,
            total_amount=total.quantize(CENT),
            num_installments=num_installments,
            installment_amount=amounts[0],
            frequency_days=frequency_days,
            start_date=first_payment_date,
            legacy_category=legacy_category(plan.total_months),
            installments=tuple(installments),
        )
        logger.info(
            f"Installment plan for member {member_id} on {plan.id}: "
            f"{num_installments} x {amounts[0]} every {frequency_days} days"
        )
        return schedule

    def pay(
        self,
        schedule: InstallmentPlan,
        number: int,
        paid_date: date,
        method: PaymentMethod,
    ) -> InstallmentPlan:
        """
        Record payment of installment ``number``.

        The schedule completes once every installment is paid.
        """
        if schedule.is_closed:
            raise InstallmentPlanClosedError(
                f"Installment plan for member {schedule.member_id} is {schedule.status.value}"
            )
        current = schedule.installment(number)
        if current is None:
            raise InstallmentNotFoundError(
                f"Installment {number} is not part of a {schedule.num_installments}-installment plan"
            )
        if not current.is_open:
            raise InstallmentAlreadyPaidError(
                f"Installment {number} is already {current.status.value}"
            )

        paid = current.model_copy(
            update={
                "status": InstallmentStatus.PAID,
                "paid_date": paid_date,
                "payment_method": method,
            }
        )
        installments = tuple(paid if i.number == number else i for i in schedule.installments)
        status = schedule.status
        if all(i.status == InstallmentStatus.PAID for i in installments):
            status = InstallmentPlanStatus.COMPLETED
            logger.info(f"Installment plan for member {schedule.member_id} completed")

        return schedule.model_copy(update={"installments": installments, "status": status})

    def refresh_overdue(
        self, schedule: InstallmentPlan, today: date
    ) -> tuple[InstallmentPlan, int]:
        """
        Mark pending installments whose due date has passed as overdue.

        Returns:
            (updated schedule, number of installments newly marked overdue)
        """
        marked = 0
        installments = []
        for item in schedule.installments:
            if (
                item.status == InstallmentStatus.PENDING
                and self._gate.classify(today, item.due_date).is_overdue
            ):
                item = item.model_copy(update={"status": InstallmentStatus.OVERDUE})
                marked += 1
            installments.append(item)

        if not marked:
            return schedule, 0
        return schedule.model_copy(update={"installments": tuple(installments)}), marked

    def due(self, schedules: Iterable[InstallmentPlan], today: date) -> list[InstallmentDue]:
        """Open installments due today or earlier, oldest due date first."""
        items = []
        for schedule in schedules:
            for item in schedule.installments:
                if not item.is_open:
                    continue
                status = self._gate.classify(today, item.due_date)
                if status.has_lapsed:
                    items.append(InstallmentDue(schedule=schedule, installment=item, status=status))
        items.sort(key=lambda d: (d.installment.due_date, d.schedule.member_id))
        return items

    def upcoming(
        self,
        schedules: Iterable[InstallmentPlan],
        today: date,
        days_ahead: Optional[int] = None,
    ) -> list[InstallmentDue]:
        """Pending installments due after today and within ``days_ahead`` days."""
        if days_ahead is None:
            days_ahead = get_billing_settings().INSTALLMENT_LOOKAHEAD_DAYS

        items = []
        for schedule in schedules:
            for item in schedule.installments:
                if item.status != InstallmentStatus.PENDING:
                    continue
                status = self._gate.classify(today, item.due_date)
                if status.days_left and status.days_left <= days_ahead:
                    items.append(InstallmentDue(schedule=schedule, installment=item, status=status))
        items.sort(key=lambda d: (d.installment.due_date, d.schedule.member_id))
        return items

    def cancel(self, schedule: InstallmentPlan) -> InstallmentPlan:
        """
        Cancel a schedule, waiving every unpaid installment.

        Raises:
            InstallmentPlanClosedError: The schedule is completed or already cancelled
        """
        if schedule.is_closed:
            raise InstallmentPlanClosedError(
                f"Cannot cancel a {schedule.status.value} installment plan"
            )
        installments = tuple(
            i.model_copy(update={"status": InstallmentStatus.WAIVED}) if i.is_open else i
            for i in schedule.installments
        )
        logger.info(
            f"Installment plan for member {schedule.member_id} cancelled, "
            f"{schedule.remaining_amount} waived"
        )
        return schedule.model_copy(
            update={"installments": installments, "status": InstallmentPlanStatus.CANCELLED}
        )


# =============================================================================
# Singleton Instance
# =============================================================================


_scheduler: Optional[InstallmentScheduler] = None


def get_installment_scheduler() -> InstallmentScheduler:
    """Get singleton installment scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = InstallmentScheduler()
    return _scheduler
