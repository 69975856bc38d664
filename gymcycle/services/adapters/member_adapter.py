"""
In-memory Membership Sink.

Applies deactivation and reactivation commands to in-memory member records
and keeps the membership event history.
"""

from dataclasses import dataclass, field
from typing import Optional

from gymcycle.core.enums import MemberStatus, MembershipEventType
from gymcycle.schemas.commands import DeactivationCommand, ReactivationCommand
from gymcycle.schemas.cycle import MembershipCycle
from gymcycle.services.adapters.base import (
    AdapterMode,
    DeactivationSink,
    ReactivationSink,
)
from gymcycle.utils.errors import PersistenceError


@dataclass
class MemberRecord:
    """Stored member state."""

    member_id: str
    status: MemberStatus
    cycle: MembershipCycle
    total_periods: int = 1
    events: list[MembershipEventType] = field(default_factory=list)


class InMemoryMembershipSink(DeactivationSink, ReactivationSink):
    """Deactivation and reactivation sink over in-memory member records."""

    def __init__(self, mode: AdapterMode = AdapterMode.DEMO):
        self._mode = mode
        self._members: dict[str, MemberRecord] = {}
        self._applied: set[str] = set()
        self._fail_next: Optional[Exception] = None

    @property
    def mode(self) -> AdapterMode:
        """Get current operating mode."""
        return self._mode

    def seed_member(
        self,
        member_id: str,
        cycle: MembershipCycle,
        status: MemberStatus = MemberStatus.ACTIVE,
    ) -> MemberRecord:
        """Create or replace a member record."""
        record = MemberRecord(
            member_id=member_id,
            status=status,
            cycle=cycle,
            events=[MembershipEventType.MEMBER_CREATED],
        )
        self._members[member_id] = record
        return record

    def get_member(self, member_id: str) -> Optional[MemberRecord]:
        return self._members.get(member_id)

    def fail_next(self, error: Optional[Exception] = None) -> None:
        """Make the next apply() call raise."""
        self._fail_next = error or PersistenceError("Simulated write failure")

    async def apply(self, command: DeactivationCommand | ReactivationCommand) -> None:
        if self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
            raise error

        if command.command_id in self._applied:
            raise PersistenceError(f"Command {command.command_id} was already applied")

        record = self._members.get(command.member_id)
        if record is None:
            raise PersistenceError(f"Member {command.member_id} not found")

        if isinstance(command, DeactivationCommand):
            record.status = MemberStatus.INACTIVE
        else:
            record.status = MemberStatus.ACTIVE
            record.cycle = command.cycle
            record.total_periods += 1

        record.events.append(command.event_type)
        self._applied.add(command.command_id)
