"""
Services Layer for the Billing-cycle Engine.

Exports plan normalization, due-date projection, eligibility gating, the
renewal flow, membership lifecycle rules, installment schedules and the
reporting helpers.
"""

from gymcycle.services.plan_catalog import (
    PlanCatalog,
    effective_price,
    get_plan_catalog,
    legacy_category,
)
from gymcycle.services.due_date_calculator import (
    DueDateCalculator,
    DueDateProjection,
    ShiftRequest,
    get_due_date_calculator,
)
from gymcycle.services.eligibility_gate import (
    CycleStatus,
    Eligibility,
    EligibilityGate,
    EligibilityPolicy,
    can_deactivate,
    can_open_payment_flow,
    classify_cycle,
    get_eligibility_gate,
    get_status_display_name,
)
from gymcycle.services.renewal_state_machine import (
    RenewalStateMachine,
    RenewalTransition,
    get_valid_events,
    is_terminal_state,
)
from gymcycle.services.membership_lifecycle import (
    MembershipLifecycle,
    get_membership_lifecycle,
)
from gymcycle.services.payment_audit import (
    AuditResult,
    HistoryEvent,
    PaymentAuditor,
    PaymentEntry,
)
from gymcycle.services.due_report import DueEntry, DueItem, DueReport, DueSummary
from gymcycle.services.installment_schedule import (
    InstallmentDue,
    InstallmentScheduler,
    get_installment_scheduler,
    split_amount,
)

__all__ = [
    # Plan catalog
    "PlanCatalog",
    "effective_price",
    "get_plan_catalog",
    "legacy_category",
    # Due dates
    "DueDateCalculator",
    "DueDateProjection",
    "ShiftRequest",
    "get_due_date_calculator",
    # Eligibility
    "CycleStatus",
    "Eligibility",
    "EligibilityGate",
    "EligibilityPolicy",
    "can_deactivate",
    "can_open_payment_flow",
    "classify_cycle",
    "get_eligibility_gate",
    "get_status_display_name",
    # Renewal flow
    "RenewalStateMachine",
    "RenewalTransition",
    "get_valid_events",
    "is_terminal_state",
    # Lifecycle
    "MembershipLifecycle",
    "get_membership_lifecycle",
    # Reporting
    "PaymentAuditor",
    "PaymentEntry",
    "HistoryEvent",
    "AuditResult",
    "DueReport",
    "DueEntry",
    "DueItem",
    "DueSummary",
    # Installments
    "InstallmentScheduler",
    "InstallmentDue",
    "get_installment_scheduler",
    "split_amount",
]
