"""
Renewal State Machine.

Drives one renewal payment submission for one member cycle.

State Diagram:
    SELECTING_PLAN -> REVIEWING_METHOD
    REVIEWING_METHOD -> CONFIRMED | AWAITING_SHIFT_CONFIRMATION
    AWAITING_SHIFT_CONFIRMATION -> CONFIRMED | REVIEWING_METHOD
    CONFIRMED -> SUBMITTING
    SUBMITTING -> SUCCEEDED | FAILED

An anchor shift needs two submits: the first parks the flow in
AWAITING_SHIFT_CONFIRMATION without touching any port, and only a later
submit with ``shift_confirmed`` moves it on. A machine commits at most one
renewal; once SUBMITTING it refuses further submits.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from gymcycle.core.enums import (
    MembershipEventType,
    RenewalEvent,
    RenewalState,
    RenewalTransitionKind,
)
from gymcycle.schemas.commands import RenewalCommand
from gymcycle.schemas.cycle import MembershipCycle, RenewalOutcome, RenewalRequest
from gymcycle.schemas.plan import Plan
from gymcycle.services.adapters.base import PaymentRecorder
from gymcycle.services.due_date_calculator import (
    DueDateCalculator,
    ShiftRequest,
    get_due_date_calculator,
)
from gymcycle.services.eligibility_gate import (
    Eligibility,
    EligibilityGate,
    get_eligibility_gate,
)
from gymcycle.services.plan_catalog import PlanCatalog, get_plan_catalog, legacy_category
from gymcycle.utils.errors import (
    BillingError,
    InvalidTransitionError,
    PaymentWindowClosedError,
    PersistenceError,
    PlanNotFoundError,
    ShiftNotAllowedError,
    ShiftNotConfirmedError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """Represents a valid state transition."""

    from_state: RenewalState
    to_state: RenewalState
    event: RenewalEvent


@dataclass(frozen=True)
class RenewalTransition:
    """Result of a submit, as seen by the calling layer."""

    kind: RenewalTransitionKind
    outcome: Optional[RenewalOutcome] = None
    error: Optional[BillingError] = None

    @classmethod
    def needs_confirmation(cls) -> "RenewalTransition":
        return cls(kind=RenewalTransitionKind.NEEDS_CONFIRMATION)

    @classmethod
    def succeeded(cls, outcome: RenewalOutcome) -> "RenewalTransition":
        return cls(kind=RenewalTransitionKind.SUCCEEDED, outcome=outcome)

    @classmethod
    def rejected(cls, error: BillingError) -> "RenewalTransition":
        return cls(kind=RenewalTransitionKind.REJECTED, error=error)

    @property
    def reason(self) -> Optional[str]:
        """Error code of a rejection."""
        return self.error.code if self.error else None


@dataclass(frozen=True)
class _PendingShift:
    plan_id: str
    shift_to_date: date


# =============================================================================
# Valid Transitions Definition
# =============================================================================


VALID_TRANSITIONS: list[Transition] = [
    # From SELECTING_PLAN
    Transition(RenewalState.SELECTING_PLAN, RenewalState.REVIEWING_METHOD, RenewalEvent.SELECT_PLAN),

    # From REVIEWING_METHOD
    Transition(RenewalState.REVIEWING_METHOD, RenewalState.REVIEWING_METHOD, RenewalEvent.SELECT_PLAN),
    Transition(RenewalState.REVIEWING_METHOD, RenewalState.CONFIRMED, RenewalEvent.CONFIRM_METHOD),
    Transition(
        RenewalState.REVIEWING_METHOD,
        RenewalState.AWAITING_SHIFT_CONFIRMATION,
        RenewalEvent.REQUEST_SHIFT,
    ),

    # From AWAITING_SHIFT_CONFIRMATION
    Transition(
        RenewalState.AWAITING_SHIFT_CONFIRMATION,
        RenewalState.AWAITING_SHIFT_CONFIRMATION,
        RenewalEvent.REQUEST_SHIFT,
    ),
    Transition(
        RenewalState.AWAITING_SHIFT_CONFIRMATION,
        RenewalState.CONFIRMED,
        RenewalEvent.CONFIRM_SHIFT,
    ),
    Transition(
        RenewalState.AWAITING_SHIFT_CONFIRMATION,
        RenewalState.REVIEWING_METHOD,
        RenewalEvent.CANCEL_SHIFT,
    ),

    # From CONFIRMED
    Transition(RenewalState.CONFIRMED, RenewalState.SUBMITTING, RenewalEvent.SUBMIT),

    # From SUBMITTING
    Transition(RenewalState.SUBMITTING, RenewalState.SUCCEEDED, RenewalEvent.RECORD_SUCCEEDED),
    Transition(RenewalState.SUBMITTING, RenewalState.FAILED, RenewalEvent.RECORD_FAILED),
]

_TRANSITIONS: dict[tuple[RenewalState, RenewalEvent], Transition] = {
    (t.from_state, t.event): t for t in VALID_TRANSITIONS
}


def get_valid_events(state: RenewalState) -> list[RenewalEvent]:
    """Get all valid events for a given state."""
    return [t.event for t in VALID_TRANSITIONS if t.from_state == state]


def is_terminal_state(state: RenewalState) -> bool:
    """Check if state is terminal (no further transitions)."""
    return state in (RenewalState.SUCCEEDED, RenewalState.FAILED)


# =============================================================================
# State Machine
# =============================================================================


class RenewalStateMachine:
    """
    One renewal flow for one member cycle.

    Entering the flow requires an open payment window; the constructor
    raises PaymentWindowClosedError otherwise. ``today`` is fixed for the
    lifetime of the flow.
    """

    def __init__(
        self,
        member_id: str,
        cycle: MembershipCycle,
        plans: Sequence[Plan],
        recorder: PaymentRecorder,
        today: date,
        gate: Optional[EligibilityGate] = None,
        calculator: Optional[DueDateCalculator] = None,
        catalog: Optional[PlanCatalog] = None,
    ):
        self._member_id = member_id
        self._cycle = cycle
        self._plans = list(plans)
        self._recorder = recorder
        self._today = today
        self._gate = gate or get_eligibility_gate()
        self._calculator = calculator or get_due_date_calculator()
        self._catalog = catalog or get_plan_catalog()

        self._state = RenewalState.SELECTING_PLAN
        self._pending_shift: Optional[_PendingShift] = None
        self._last_command: Optional[RenewalCommand] = None
        self._outcome: Optional[RenewalOutcome] = None

        self._eligibility = self._gate.evaluate(today, cycle.current_due_date)
        if not self._eligibility.payment_window_open:
            logger.warning(
                f"Payment flow refused for member {member_id}: window opens in "
                f"{self._eligibility.days_until_window_opens} day(s)"
            )
            raise PaymentWindowClosedError(
                self._eligibility.days_until_window_opens,
                due_date=cycle.current_due_date,
            )

    @property
    def state(self) -> RenewalState:
        return self._state

    @property
    def cycle(self) -> MembershipCycle:
        """Cycle state; replaced only after a successful renewal."""
        return self._cycle

    @property
    def eligibility(self) -> Eligibility:
        return self._eligibility

    @property
    def outcome(self) -> Optional[RenewalOutcome]:
        return self._outcome

    @property
    def last_command(self) -> Optional[RenewalCommand]:
        """Command sent to the recorder, if one was sent."""
        return self._last_command

    def _fire(self, event: RenewalEvent) -> None:
        transition = _TRANSITIONS.get((self._state, event))
        if transition is None:
            raise InvalidTransitionError(
                f"Invalid transition: {self._state.value} + {event.value}"
            )
        logger.debug(
            f"Renewal for member {self._member_id}: "
            f"{self._state.value} -> {transition.to_state.value} (event: {event.value})"
        )
        self._state = transition.to_state

    async def submit(self, request: RenewalRequest) -> RenewalTransition:
        """
        Advance the flow with a payment submission.

        Returns:
            NEEDS_CONFIRMATION when an anchor shift awaits its second
            confirmation, SUCCEEDED with the outcome once the recorder
            accepted the renewal, REJECTED with the error otherwise
        """
        if self._state in (RenewalState.CONFIRMED, RenewalState.SUBMITTING) or is_terminal_state(self._state):
            return RenewalTransition.rejected(
                InvalidTransitionError(
                    f"Renewal flow for member {self._member_id} is already {self._state.value}"
                )
            )

        try:
            plan = self._catalog.find(self._plans, request.plan_id)
            shifting = self._review(request, plan)
        except ShiftNotConfirmedError:
            return RenewalTransition.needs_confirmation()
        except (PlanNotFoundError, ShiftNotAllowedError) as e:
            logger.warning(f"Renewal rejected for member {self._member_id}: {e}")
            return RenewalTransition.rejected(e)

        return await self._commit(request, plan, shifting)

    def _review(self, request: RenewalRequest, plan: Plan) -> bool:
        """Move the flow to CONFIRMED; returns whether the anchor shifts."""
        if self._state == RenewalState.AWAITING_SHIFT_CONFIRMATION:
            if not request.shift_requested:
                self._pending_shift = None
                self._fire(RenewalEvent.CANCEL_SHIFT)
            elif request.shift_confirmed and self._pending_shift == self._shift_for(request, plan):
                self._fire(RenewalEvent.CONFIRM_SHIFT)
                return True
            else:
                self._fire(RenewalEvent.REQUEST_SHIFT)
                self._require_shift_confirmation(request, plan)

        self._fire(RenewalEvent.SELECT_PLAN)

        if request.shift_requested:
            if not self._eligibility.status.is_overdue:
                raise ShiftNotAllowedError(
                    "Anchor day can only be shifted while the cycle is overdue"
                )
            self._fire(RenewalEvent.REQUEST_SHIFT)
            self._require_shift_confirmation(request, plan)

        self._fire(RenewalEvent.CONFIRM_METHOD)
        return False

    def _shift_for(self, request: RenewalRequest, plan: Plan) -> _PendingShift:
        return _PendingShift(
            plan_id=plan.id,
            shift_to_date=request.shift_to_date or self._today,
        )

    def _require_shift_confirmation(self, request: RenewalRequest, plan: Plan) -> None:
        self._pending_shift = self._shift_for(request, plan)
        logger.info(
            f"Anchor shift to {self._pending_shift.shift_to_date.isoformat()} "
            f"awaiting confirmation for member {self._member_id}"
        )
        raise ShiftNotConfirmedError("Anchor shift needs confirmation")

    async def _commit(
        self,
        request: RenewalRequest,
        plan: Plan,
        shifting: bool,
    ) -> RenewalTransition:
        shift = ShiftRequest(shift_to_date=self._pending_shift.shift_to_date) if shifting else None
        projection = self._calculator.next_due_date(self._cycle, plan, self._today, shift)

        outcome = RenewalOutcome(
            new_due_date=projection.due_date,
            new_anchor_day=projection.anchor_day,
            legacy_category=legacy_category(plan.total_months),
            anchor_shifted=shifting,
        )
        command = RenewalCommand(
            member_id=self._member_id,
            plan_id=plan.id,
            plan_name=plan.name,
            total_months=plan.total_months,
            amount=request.amount,
            method=request.method,
            payment_date=request.payment_date,
            notes=request.notes,
            expected_due_date=self._cycle.current_due_date,
            new_due_date=outcome.new_due_date,
            new_anchor_day=outcome.new_anchor_day,
            legacy_category=outcome.legacy_category,
            event_type=(
                MembershipEventType.BASE_DATE_SHIFTED
                if shifting
                else MembershipEventType.PAYMENT_RECORDED
            ),
        )

        self._fire(RenewalEvent.SUBMIT)
        self._last_command = command
        try:
            await self._recorder.record(command)
        except Exception as e:
            error = PersistenceError.wrap(e)
            self._fire(RenewalEvent.RECORD_FAILED)
            logger.error(
                f"Renewal {command.command_id} for member {self._member_id} failed: {error}"
            )
            return RenewalTransition.rejected(error)

        self._fire(RenewalEvent.RECORD_SUCCEEDED)
        self._cycle = self._cycle.renewed(outcome.new_due_date, outcome.new_anchor_day)
        self._outcome = outcome
        self._pending_shift = None

        logger.info(
            f"Renewal {command.command_id} recorded for member {self._member_id}: "
            f"next due {outcome.new_due_date.isoformat()} (anchor {outcome.new_anchor_day}"
            f"{', shifted' if shifting else ''})"
        )
        return RenewalTransition.succeeded(outcome)
