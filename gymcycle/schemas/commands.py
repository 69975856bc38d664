"""
Command Schemas handed to persistence ports.

Each command carries a generated ``command_id`` so a sink can reject a
duplicate write of the same intent.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from gymcycle.core.enums import (
    LegacyPlanCategory,
    MemberStatus,
    MembershipEventType,
    PaymentMethod,
)
from gymcycle.schemas.cycle import MembershipCycle


def _command_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12].upper()}"


class RenewalCommand(BaseModel):
    """Payment write plus due-date advance for one renewal."""

    model_config = ConfigDict(frozen=True)

    command_id: str = Field(default_factory=lambda: _command_id("RNW"))
    member_id: str
    plan_id: str
    plan_name: str
    total_months: int = Field(..., ge=1)
    amount: Decimal
    method: PaymentMethod
    payment_date: date
    notes: Optional[str] = None

    # Optimistic concurrency: the due date the cycle had when the flow started
    expected_due_date: Optional[date] = None

    new_due_date: date
    new_anchor_day: int = Field(..., ge=1, le=31)
    legacy_category: LegacyPlanCategory
    event_type: MembershipEventType = MembershipEventType.PAYMENT_RECORDED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def anchor_shifted(self) -> bool:
        return self.event_type == MembershipEventType.BASE_DATE_SHIFTED


class DeactivationCommand(BaseModel):
    """Marks an active member inactive."""

    model_config = ConfigDict(frozen=True)

    command_id: str = Field(default_factory=lambda: _command_id("DEA"))
    member_id: str
    effective_date: date
    last_due_date: Optional[date] = None
    event_type: MembershipEventType = MembershipEventType.STATUS_CHANGED_TO_INACTIVE


class ReactivationCommand(BaseModel):
    """Starts a new cycle epoch for a returning member."""

    model_config = ConfigDict(frozen=True)

    command_id: str = Field(default_factory=lambda: _command_id("REA"))
    member_id: str
    plan_id: str
    plan_name: str
    amount: Decimal
    method: PaymentMethod
    start_date: date
    cycle: MembershipCycle
    legacy_category: LegacyPlanCategory
    event_type: MembershipEventType = MembershipEventType.MEMBER_REACTIVATED


class ReversalCommand(BaseModel):
    """Removes a recorded renewal and steps the cycle back."""

    model_config = ConfigDict(frozen=True)

    command_id: str = Field(default_factory=lambda: _command_id("REV"))
    member_id: str
    payment_command_id: str = Field(..., description="Renewal being reversed")
    plan_id: str
    total_months: int = Field(..., ge=1)
    amount: Decimal
    expected_due_date: date
    cycle: MembershipCycle
    status: MemberStatus
    event_type: MembershipEventType = MembershipEventType.PAYMENT_DELETED

    @property
    def reverted_due_date(self) -> date:
        return self.cycle.current_due_date
