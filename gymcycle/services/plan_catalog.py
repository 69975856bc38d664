"""
Plan Catalog.

Normalizes raw plan rows into validated Plans and derives the legacy plan
category from a plan's total months.

Ordering: regular plans (no bonus months) by ascending price, followed by
special/promotional plans by ascending price.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from gymcycle.core.categories import LEGACY_CATEGORY_BOUNDS, legacy_category  # noqa: F401
from gymcycle.core.enums import DiscountType
from gymcycle.schemas.plan import Plan, RawPlan
from gymcycle.services.adapters.base import PlanSource
from gymcycle.utils.errors import InvalidPlanDataError, PlanNotFoundError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def effective_price(raw: RawPlan) -> Decimal:
    """List price after the plan's discount, never below zero."""
    price = raw.price
    if raw.discount_type == DiscountType.PERCENTAGE:
        price = price * (Decimal("1") - raw.discount_value / Decimal("100"))
    elif raw.discount_type == DiscountType.FLAT:
        price = price - raw.discount_value
    return max(price, Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)


class PlanCatalog:
    """Normalization and lookup over membership plans."""

    def to_plan(self, raw: RawPlan) -> Plan:
        """Validate one raw row and convert it to a Plan."""
        base_months = raw.base_months if raw.base_months is not None else raw.duration_months
        if base_months is None:
            raise InvalidPlanDataError(f"Plan {raw.id} has no duration")
        if base_months < 1:
            raise InvalidPlanDataError(
                f"Plan {raw.id} base months must be at least 1, got {base_months}"
            )
        if raw.bonus_months < 0:
            raise InvalidPlanDataError(
                f"Plan {raw.id} bonus months cannot be negative, got {raw.bonus_months}"
            )
        if raw.price < 0:
            raise InvalidPlanDataError(f"Plan {raw.id} price cannot be negative")

        return Plan(
            id=raw.id,
            name=raw.name,
            base_months=base_months,
            bonus_months=raw.bonus_months,
            price_amount=effective_price(raw),
            is_active=raw.is_active,
        )

    def normalize(self, raw_plans: Iterable[RawPlan]) -> list[Plan]:
        """
        Normalize raw plans for the plan picker.

        Inactive plans are dropped before validation. Regular plans come
        first, then special plans, each ordered by ascending price.

        Raises:
            InvalidPlanDataError: when an active plan has malformed durations
        """
        plans = [self.to_plan(raw) for raw in raw_plans if raw.is_active]
        regular, special = self.partition(plans)
        return regular + special

    def partition(self, plans: Iterable[Plan]) -> tuple[list[Plan], list[Plan]]:
        """Split plans into (regular, special), each sorted by price."""
        regular: list[Plan] = []
        special: list[Plan] = []
        for plan in plans:
            (special if plan.is_special else regular).append(plan)
        regular.sort(key=lambda p: p.price_amount)
        special.sort(key=lambda p: p.price_amount)
        return regular, special

    def find(self, plans: Iterable[Plan], plan_id: str) -> Plan:
        """Look up a plan by id among the given plans."""
        plan = self.get(plans, plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan {plan_id} is not an eligible plan")
        return plan

    def get(self, plans: Iterable[Plan], plan_id: str) -> Optional[Plan]:
        for plan in plans:
            if plan.id == plan_id:
                return plan
        return None

    async def load(self, source: PlanSource) -> list[Plan]:
        """
        Load and normalize the active plans from a plan source.

        An empty source yields an empty list; SourceUnavailableError from the
        source propagates unchanged.
        """
        raw_plans = await source.list_active()
        plans = self.normalize(raw_plans)
        if not plans:
            logger.info("No eligible plans returned by plan source")
        return plans


# =============================================================================
# Singleton Instance
# =============================================================================


_plan_catalog: Optional[PlanCatalog] = None


def get_plan_catalog() -> PlanCatalog:
    """Get singleton plan catalog instance."""
    global _plan_catalog
    if _plan_catalog is None:
        _plan_catalog = PlanCatalog()
    return _plan_catalog
