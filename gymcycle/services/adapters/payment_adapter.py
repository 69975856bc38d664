"""
In-memory Payment Recorder.

Records and reverses renewal commands for demo mode and tests. Each member's
stored due date acts as the version of its cycle record: a command whose
``expected_due_date`` no longer matches is rejected, so two renewals started
from the same cycle cannot both advance it.
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from gymcycle.schemas.commands import RenewalCommand, ReversalCommand
from gymcycle.services.adapters.base import AdapterMode, PaymentRecorder, PaymentReverser
from gymcycle.utils.errors import PersistenceError


class InMemoryPaymentRecorder(PaymentRecorder, PaymentReverser):
    """Payment recorder with optimistic concurrency on the member's due date."""

    def __init__(self, mode: AdapterMode = AdapterMode.DEMO):
        """Initialize InMemoryPaymentRecorder."""
        self._mode = mode
        self._commands: dict[str, RenewalCommand] = {}
        self._reversals: dict[str, ReversalCommand] = {}
        self._due_dates: dict[str, Optional[date]] = {}
        self._payment_history: list[dict] = []
        self._failures: list[Exception] = []
        self._lock = asyncio.Lock()

    @property
    def mode(self) -> AdapterMode:
        """Get current operating mode."""
        return self._mode

    @property
    def commands(self) -> list[RenewalCommand]:
        """Committed, unreversed commands in commit order."""
        return list(self._commands.values())

    @property
    def call_count(self) -> int:
        """Number of record() and revert() calls, including failed ones."""
        return len(self._payment_history)

    def seed_member(self, member_id: str, due_date: Optional[date]) -> None:
        """Set a member's stored due date."""
        self._due_dates[member_id] = due_date

    def get_due_date(self, member_id: str) -> Optional[date]:
        return self._due_dates.get(member_id)

    def fail_next(self, error: Optional[Exception] = None) -> None:
        """Make the next record() or revert() call raise."""
        self._failures.append(error or PersistenceError("Simulated write failure"))

    def _check_version(
        self,
        member_id: str,
        expected_due_date: Optional[date],
        command_id: str,
        amount: Decimal,
        new_due_date: date,
    ) -> None:
        if member_id not in self._due_dates:
            return
        stored = self._due_dates[member_id]
        if stored != expected_due_date:
            self._log_payment_event(command_id, member_id, "conflict", amount, new_due_date)
            raise PersistenceError(
                f"Cycle for member {member_id} changed "
                f"(expected due {expected_due_date}, found {stored})"
            )

    async def record(self, command: RenewalCommand) -> None:
        async with self._lock:
            args = (command.command_id, command.member_id)
            if self._failures:
                error = self._failures.pop(0)
                self._log_payment_event(*args, "failed", command.amount, command.new_due_date)
                raise error

            if command.command_id in self._commands:
                self._log_payment_event(*args, "duplicate", command.amount, command.new_due_date)
                raise PersistenceError(
                    f"Renewal {command.command_id} was already recorded"
                )

            self._check_version(
                command.member_id,
                command.expected_due_date,
                command.command_id,
                command.amount,
                command.new_due_date,
            )

            self._commands[command.command_id] = command
            self._due_dates[command.member_id] = command.new_due_date
            self._log_payment_event(*args, "recorded", command.amount, command.new_due_date)

    async def revert(self, command: ReversalCommand) -> None:
        async with self._lock:
            args = (command.command_id, command.member_id)
            if self._failures:
                error = self._failures.pop(0)
                self._log_payment_event(*args, "failed", command.amount, command.reverted_due_date)
                raise error

            if command.command_id in self._reversals:
                self._log_payment_event(*args, "duplicate", command.amount, command.reverted_due_date)
                raise PersistenceError(
                    f"Reversal {command.command_id} was already applied"
                )

            renewal = self._commands.get(command.payment_command_id)
            if renewal is None or renewal.member_id != command.member_id:
                self._log_payment_event(*args, "not_found", command.amount, command.reverted_due_date)
                raise PersistenceError(
                    f"Payment {command.payment_command_id} not found for member {command.member_id}"
                )

            self._check_version(
                command.member_id,
                command.expected_due_date,
                command.command_id,
                command.amount,
                command.reverted_due_date,
            )

            del self._commands[command.payment_command_id]
            self._reversals[command.command_id] = command
            self._due_dates[command.member_id] = command.reverted_due_date
            self._log_payment_event(*args, "reverted", command.amount, command.reverted_due_date)

    def _log_payment_event(
        self,
        command_id: str,
        member_id: str,
        event: str,
        amount: Decimal,
        new_due_date: Optional[date],
    ) -> None:
        self._payment_history.append(
            {
                "command_id": command_id,
                "member_id": member_id,
                "event": event,
                "amount": amount,
                "new_due_date": new_due_date,
                "timestamp": datetime.now(timezone.utc),
            }
        )

    def get_payment_history(self, member_id: Optional[str] = None) -> list[dict]:
        """Get recorder events, optionally for one member."""
        if member_id is None:
            return list(self._payment_history)
        return [e for e in self._payment_history if e["member_id"] == member_id]
