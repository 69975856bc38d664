"""
Pydantic Schemas for Membership Cycles and Renewals.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gymcycle.core.enums import LegacyPlanCategory, PaymentMethod


class MembershipCycle(BaseModel):
    """
    Billing state of one membership epoch.

    ``anchor_day`` defaults to the day-of-month of ``joining_date`` and only
    changes through an explicit shift. ``current_due_date`` is None for new or
    migrated members, for whom no gating applies yet.
    """

    model_config = ConfigDict(frozen=True)

    anchor_day: int = Field(..., ge=1, le=31)
    current_due_date: Optional[date] = None
    joining_date: date

    @model_validator(mode="before")
    @classmethod
    def default_anchor_from_joining(cls, data: Any) -> Any:
        """Fill anchor_day from the joining date when not given."""
        if isinstance(data, dict) and data.get("anchor_day") is None:
            joining = data.get("joining_date")
            if isinstance(joining, str):
                joining = date.fromisoformat(joining)
            if isinstance(joining, date):
                data = {**data, "anchor_day": joining.day}
        return data

    def renewed(self, due_date: date, anchor_day: int) -> "MembershipCycle":
        """Return the cycle after a successful renewal."""
        return self.model_copy(
            update={"current_due_date": due_date, "anchor_day": anchor_day}
        )


class RenewalRequest(BaseModel):
    """Payment submission coming from the calling layer."""

    plan_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    payment_date: date
    method: PaymentMethod = PaymentMethod.CASH
    shift_requested: bool = False
    shift_to_date: Optional[date] = None
    shift_confirmed: bool = False
    notes: Optional[str] = None


class RenewalOutcome(BaseModel):
    """Result of a committed renewal."""

    model_config = ConfigDict(frozen=True)

    new_due_date: date
    new_anchor_day: int = Field(..., ge=1, le=31)
    legacy_category: LegacyPlanCategory
    anchor_shifted: bool = False
