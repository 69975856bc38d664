"""
Base Port Definitions.

Abstract interfaces the billing engine consumes. Live implementations talk to
the hosted data store; the in-memory adapters in this package back demo mode
and tests.
"""

from abc import ABC, abstractmethod
from enum import Enum

from gymcycle.schemas.commands import (
    DeactivationCommand,
    ReactivationCommand,
    RenewalCommand,
    ReversalCommand,
)
from gymcycle.schemas.plan import RawPlan


class AdapterMode(str, Enum):
    """Adapter operating mode."""

    DEMO = "demo"
    LIVE = "live"


class PlanSource(ABC):
    """Source of plan records."""

    @abstractmethod
    async def list_active(self) -> list[RawPlan]:
        """
        List active plan records.

        Raises:
            SourceUnavailableError: when the source cannot be read
        """
        pass


class PaymentRecorder(ABC):
    """Persists a renewal payment and the due-date advance it implies."""

    @abstractmethod
    async def record(self, command: RenewalCommand) -> None:
        """
        Record a renewal.

        Raises:
            PersistenceError: when the write fails or is rejected
        """
        pass


class PaymentReverser(ABC):
    """Removes a recorded renewal and steps the member's due date back."""

    @abstractmethod
    async def revert(self, command: ReversalCommand) -> None:
        """
        Reverse a renewal.

        Raises:
            PersistenceError: when the payment is unknown or the cycle moved on
        """
        pass


class DeactivationSink(ABC):
    """Persists a member deactivation."""

    @abstractmethod
    async def apply(self, command: DeactivationCommand) -> None:
        pass


class ReactivationSink(ABC):
    """Persists a member reactivation and its new cycle epoch."""

    @abstractmethod
    async def apply(self, command: ReactivationCommand) -> None:
        pass
