"""
Pydantic Schemas for the Billing-cycle Engine.

This module exports plan, cycle, command and installment schemas.
"""

from gymcycle.schemas.plan import Plan, RawPlan
from gymcycle.schemas.cycle import MembershipCycle, RenewalOutcome, RenewalRequest
from gymcycle.schemas.commands import (
    DeactivationCommand,
    ReactivationCommand,
    RenewalCommand,
    ReversalCommand,
)
from gymcycle.schemas.installment import Installment, InstallmentPlan

__all__ = [
    # Plans
    "RawPlan",
    "Plan",
    # Cycles
    "MembershipCycle",
    "RenewalRequest",
    "RenewalOutcome",
    # Commands
    "RenewalCommand",
    "DeactivationCommand",
    "ReactivationCommand",
    "ReversalCommand",
    # Installments
    "Installment",
    "InstallmentPlan",
]
