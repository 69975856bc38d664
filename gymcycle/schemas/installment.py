"""
Pydantic Schemas for Installment Plans.

A plan price can be split into N installments due every ``frequency_days``.
Installment 1 is collected at signup; the rest are tracked until paid,
waived on cancellation, or flagged overdue.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gymcycle.core.enums import (
    InstallmentPlanStatus,
    InstallmentStatus,
    LegacyPlanCategory,
    PaymentMethod,
)


class Installment(BaseModel):
    """One scheduled installment."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    amount: Decimal = Field(..., ge=0)
    due_date: date
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None

    @property
    def is_open(self) -> bool:
        """Still owed: pending or overdue."""
        return self.status in (InstallmentStatus.PENDING, InstallmentStatus.OVERDUE)


class InstallmentPlan(BaseModel):
    """A member's installment schedule for one plan purchase."""

    model_config = ConfigDict(frozen=True)

    member_id: str = Field(..., min_length=1)
    plan_id: str
    total_amount: Decimal = Field(..., gt=0)
    num_installments: int = Field(..., ge=2)
    installment_amount: Decimal = Field(..., description="Amount of every installment but the last")
    frequency_days: int = Field(..., ge=1)
    start_date: date
    legacy_category: LegacyPlanCategory
    status: InstallmentPlanStatus = InstallmentPlanStatus.ACTIVE
    installments: tuple[Installment, ...] = ()

    @property
    def paid_count(self) -> int:
        return sum(1 for i in self.installments if i.status == InstallmentStatus.PAID)

    @property
    def paid_amount(self) -> Decimal:
        return sum(
            (i.amount for i in self.installments if i.status == InstallmentStatus.PAID),
            Decimal("0"),
        )

    @property
    def remaining_amount(self) -> Decimal:
        return sum((i.amount for i in self.installments if i.is_open), Decimal("0"))

    @property
    def is_closed(self) -> bool:
        return self.status in (InstallmentPlanStatus.COMPLETED, InstallmentPlanStatus.CANCELLED)

    def installment(self, number: int) -> Optional[Installment]:
        return next((i for i in self.installments if i.number == number), None)
