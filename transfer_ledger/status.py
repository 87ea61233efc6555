"""
Transfer Status Machine

pending is the only non-terminal state. Every transition outside the
table below is rejected and leaves the record as it was.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional

from .errors import InvalidTransition
from .transfers import TransferRecord, TransferStatus, parse_status

TRANSITIONS: Dict[TransferStatus, FrozenSet[TransferStatus]] = {
    TransferStatus.PENDING: frozenset({TransferStatus.COMPLETED, TransferStatus.FAILED}),
    TransferStatus.COMPLETED: frozenset(),
    TransferStatus.FAILED: frozenset(),
}


class StatusMachine:
    """Validates and applies transfer status transitions"""

    def __init__(self, transitions: Optional[Dict[TransferStatus, FrozenSet[TransferStatus]]] = None):
        self.transitions = transitions or TRANSITIONS

    def allowed_transitions(self, current: TransferStatus) -> FrozenSet[TransferStatus]:
        return self.transitions.get(parse_status(current), frozenset())

    def can_transition(self, current: TransferStatus, requested: TransferStatus) -> bool:
        return parse_status(requested) in self.allowed_transitions(current)

    def is_terminal(self, status: TransferStatus) -> bool:
        return not self.allowed_transitions(status)

    def validate(self, transfer: TransferRecord, requested: TransferStatus) -> TransferStatus:
        requested = parse_status(requested)
        if not self.can_transition(transfer.status, requested):
            raise InvalidTransition(transfer.status, requested, transfer.id)
        return requested

    def apply(self, transfer: TransferRecord, requested: TransferStatus,
              now: Optional[datetime] = None) -> TransferRecord:
        """
        Return a copy of transfer in the requested status

        Amounts are carried over untouched; the argument is never mutated.

        Raises:
            InvalidTransition: If the table has no such edge
        """
        requested = self.validate(transfer, requested)
        return replace(
            transfer,
            status=requested,
            updated_at=now or datetime.now(timezone.utc)
        )


default_status_machine = StatusMachine()


def transition(transfer: TransferRecord, requested: TransferStatus) -> TransferRecord:
    """Apply a transition with the default table"""
    return default_status_machine.apply(transfer, requested)
