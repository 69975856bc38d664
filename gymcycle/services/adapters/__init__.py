"""
Ports and In-memory Adapters.

Abstract ports the billing engine consumes, plus in-memory implementations
used in demo mode and tests.
"""

from gymcycle.services.adapters.base import (
    AdapterMode,
    DeactivationSink,
    PaymentRecorder,
    PaymentReverser,
    PlanSource,
    ReactivationSink,
)
from gymcycle.services.adapters.member_adapter import InMemoryMembershipSink, MemberRecord
from gymcycle.services.adapters.payment_adapter import InMemoryPaymentRecorder
from gymcycle.services.adapters.plan_adapter import InMemoryPlanSource


__all__ = [
    # Ports
    "AdapterMode",
    "PlanSource",
    "PaymentRecorder",
    "PaymentReverser",
    "DeactivationSink",
    "ReactivationSink",
    # In-memory adapters
    "InMemoryPlanSource",
    "InMemoryPaymentRecorder",
    "InMemoryMembershipSink",
    "MemberRecord",
]
