"""
Pydantic Schemas for Membership Plans.

RawPlan mirrors a plan row as stored; Plan is the normalized, validated shape
the engine computes with.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gymcycle.core.categories import legacy_category
from gymcycle.core.enums import DiscountType, LegacyPlanCategory, PlanPartition


class RawPlan(BaseModel):
    """Plan record as returned by a plan source."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Plan identifier")
    name: str = Field(..., description="Display name")
    base_months: Optional[int] = Field(None, description="Paid months")
    duration_months: Optional[int] = Field(
        None, description="Legacy duration column, used when base_months is missing"
    )
    bonus_months: int = Field(default=0, description="Free promotional months")
    price: Decimal = Field(..., description="List price")
    discount_type: DiscountType = Field(default=DiscountType.NONE)
    discount_value: Decimal = Field(default=Decimal("0"))
    is_active: bool = Field(default=True)


class Plan(BaseModel):
    """Normalized membership plan."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    base_months: int = Field(..., ge=1)
    bonus_months: int = Field(default=0, ge=0)
    price_amount: Decimal = Field(..., ge=0)
    is_active: bool = True

    @property
    def total_months(self) -> int:
        """Billed duration including bonus months."""
        return self.base_months + self.bonus_months

    @property
    def is_special(self) -> bool:
        """Promotional plans carry bonus months."""
        return self.bonus_months > 0

    @property
    def partition(self) -> PlanPartition:
        return PlanPartition.SPECIAL if self.is_special else PlanPartition.REGULAR

    @property
    def legacy_category(self) -> LegacyPlanCategory:
        return legacy_category(self.total_months)
