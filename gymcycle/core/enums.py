"""
Core Enumerations for the Membership Billing-Cycle Engine.

Values match the strings stored by the membership records, so enums can be
compared directly against raw column values.
"""

from enum import Enum


# =============================================================================
# Plan Enums
# =============================================================================


class LegacyPlanCategory(str, Enum):
    """Coarse plan category still used by older reporting."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"
    ANNUAL = "annual"


class PlanPartition(str, Enum):
    """Plan grouping shown on the plan picker."""

    REGULAR = "regular"  # No bonus months
    SPECIAL = "special"  # Promotional, carries bonus months


class DiscountType(str, Enum):
    """Discount applied on top of a plan's list price."""

    NONE = "none"
    PERCENTAGE = "percentage"
    FLAT = "flat"


# =============================================================================
# Cycle Enums
# =============================================================================


class CycleStatusKind(str, Enum):
    """Standing of a membership cycle relative to today."""

    NO_DUE_DATE = "no_due_date"  # New or migrated member
    UPCOMING = "upcoming"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"


class MemberStatus(str, Enum):
    """Member activity status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentMethod(str, Enum):
    """Payment method values."""

    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


class MembershipEventType(str, Enum):
    """Membership history event recorded alongside each command."""

    MEMBER_CREATED = "member_created"
    PAYMENT_RECORDED = "payment_recorded"
    BASE_DATE_SHIFTED = "base_date_shifted"
    STATUS_CHANGED_TO_INACTIVE = "status_changed_to_inactive"
    MEMBER_REACTIVATED = "member_reactivated"
    PAYMENT_DELETED = "payment_deleted"


# =============================================================================
# Installment Enums
# =============================================================================


class InstallmentStatus(str, Enum):
    """Status of a single installment."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    WAIVED = "waived"  # Left unpaid when the plan was cancelled


class InstallmentPlanStatus(str, Enum):
    """Status of an installment plan as a whole."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"
    CANCELLED = "cancelled"


# =============================================================================
# Renewal Flow Enums
# =============================================================================


class RenewalState(str, Enum):
    """States of a renewal submission."""

    SELECTING_PLAN = "selecting_plan"
    REVIEWING_METHOD = "reviewing_method"
    AWAITING_SHIFT_CONFIRMATION = "awaiting_shift_confirmation"
    CONFIRMED = "confirmed"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RenewalEvent(str, Enum):
    """Events that drive renewal state transitions."""

    SELECT_PLAN = "select_plan"
    CONFIRM_METHOD = "confirm_method"
    REQUEST_SHIFT = "request_shift"
    CONFIRM_SHIFT = "confirm_shift"
    CANCEL_SHIFT = "cancel_shift"
    SUBMIT = "submit"
    RECORD_SUCCEEDED = "record_succeeded"
    RECORD_FAILED = "record_failed"


class RenewalTransitionKind(str, Enum):
    """Result kinds returned to the calling layer by a submit."""

    NEEDS_CONFIRMATION = "needs_confirmation"
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
