"""
Custom Exceptions
Billing-cycle specific error handling.

Gating errors are raised before any port is called; PersistenceError is the
only error that can follow a dispatched command.
"""

from datetime import date
from typing import Optional


class BillingError(Exception):
    """Base exception for billing-cycle errors."""

    code = "billing_error"

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class InvalidPlanDataError(BillingError):
    """Raised when a plan record has malformed durations."""

    code = "invalid_plan_data"


class PlanNotFoundError(BillingError):
    """Raised when a plan id is not among the eligible plans."""

    code = "plan_not_found"


class PaymentWindowClosedError(BillingError):
    """Raised when a renewal is attempted before the payment window opens."""

    code = "payment_window_closed"

    def __init__(self, days_until_window_opens: int, due_date: Optional[date] = None):
        super().__init__(
            f"Payment window opens in {days_until_window_opens} day(s)"
        )
        self.days_until_window_opens = days_until_window_opens
        self.due_date = due_date


class ShiftNotConfirmedError(BillingError):
    """Internal signal: an anchor shift still needs its second confirmation."""

    code = "shift_not_confirmed"


class ShiftNotAllowedError(BillingError):
    """Raised when an anchor shift is requested on a cycle that is not overdue."""

    code = "shift_not_allowed"


class DeactivationNotAllowedError(BillingError):
    """Raised when an active cycle still has paid, unexpired time."""

    code = "deactivation_not_allowed"

    def __init__(self, days_left: int, due_date: date):
        super().__init__(
            f"Membership is paid until {due_date.isoformat()} ({days_left} day(s) left)"
        )
        self.days_left = days_left
        self.due_date = due_date


class AlreadyInactiveError(BillingError):
    """Raised when deactivating a member that is already inactive."""

    code = "already_inactive"


class AlreadyActiveError(BillingError):
    """Raised when reactivating a member that is still active."""

    code = "already_active"


class InvalidStartDateError(BillingError):
    """Raised when a reactivation start date falls outside the allowed range."""

    code = "invalid_start_date"


class ReversalNotAllowedError(BillingError):
    """Raised when a payment reversal has no due date to step back from."""

    code = "reversal_not_allowed"


class InvalidInstallmentPlanError(BillingError):
    """Raised when an installment plan cannot be built from its inputs."""

    code = "invalid_installment_plan"


class InstallmentNotFoundError(BillingError):
    """Raised when an installment number is not part of the plan."""

    code = "installment_not_found"


class InstallmentAlreadyPaidError(BillingError):
    """Raised when paying an installment that is already settled."""

    code = "installment_already_paid"


class InstallmentPlanClosedError(BillingError):
    """Raised when changing a completed or cancelled installment plan."""

    code = "installment_plan_closed"


class InvalidTransitionError(BillingError):
    """Raised when a renewal flow event is not valid in the current state."""

    code = "invalid_transition"


class SourceUnavailableError(BillingError):
    """Raised when the plan source cannot be read."""

    code = "source_unavailable"


class PersistenceError(BillingError):
    """Opaque wrapper around a failure reported by a persistence port."""

    code = "persistence_error"

    @classmethod
    def wrap(cls, error: Exception) -> "PersistenceError":
        """Wrap a port failure, leaving an existing PersistenceError as-is."""
        if isinstance(error, PersistenceError):
            return error
        return cls(str(error) or type(error).__name__, original_error=error)
