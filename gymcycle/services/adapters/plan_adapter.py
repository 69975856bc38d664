"""
In-memory Plan Source.

Serves plan records for demo mode and tests.
"""

from typing import Optional

from gymcycle.schemas.plan import RawPlan
from gymcycle.services.adapters.base import AdapterMode, PlanSource
from gymcycle.utils.errors import SourceUnavailableError


class InMemoryPlanSource(PlanSource):
    """Plan source backed by a list of raw plan records."""

    def __init__(
        self,
        plans: Optional[list[RawPlan]] = None,
        mode: AdapterMode = AdapterMode.DEMO,
    ):
        self._mode = mode
        self._plans: dict[str, RawPlan] = {}
        self._available = True
        for plan in plans or []:
            self.upsert(plan)

    @property
    def mode(self) -> AdapterMode:
        """Get current operating mode."""
        return self._mode

    def upsert(self, plan: RawPlan) -> None:
        """Add or replace a plan record."""
        self._plans[plan.id] = plan

    def set_available(self, available: bool) -> None:
        """Simulate the source going down or coming back."""
        self._available = available

    async def list_active(self) -> list[RawPlan]:
        if not self._available:
            raise SourceUnavailableError("Plan source is unavailable")
        return [p for p in self._plans.values() if p.is_active]
