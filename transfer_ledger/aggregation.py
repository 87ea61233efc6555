"""
Balance Aggregation Module

Reduces a collection of transfers into directional totals and a net
balance. Only completed transfers contribute: pending and failed movements
are not real money yet.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from .date_window import DateWindow
from .transfers import TransferRecord, TransferStatus, TransferType

ZERO = Decimal('0')


@dataclass(frozen=True)
class BalanceSummary:
    """Totals over completed transfers"""
    total_incoming: Decimal = ZERO
    total_outgoing: Decimal = ZERO
    total_commissions: Decimal = ZERO
    count: int = 0

    @property
    def net_balance(self) -> Decimal:
        return self.total_incoming - self.total_outgoing - self.total_commissions

    @classmethod
    def zero(cls) -> 'BalanceSummary':
        return cls()

    def __add__(self, other: 'BalanceSummary') -> 'BalanceSummary':
        if not isinstance(other, BalanceSummary):
            return NotImplemented
        return BalanceSummary(
            total_incoming=self.total_incoming + other.total_incoming,
            total_outgoing=self.total_outgoing + other.total_outgoing,
            total_commissions=self.total_commissions + other.total_commissions,
            count=self.count + other.count
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "total_incoming": str(self.total_incoming),
            "total_outgoing": str(self.total_outgoing),
            "total_commissions": str(self.total_commissions),
            "net_balance": str(self.net_balance),
            "count": self.count
        }


def aggregate(transfers: Iterable[TransferRecord], window: Optional[DateWindow] = None,
              predicate: Optional[Callable[[TransferRecord], bool]] = None) -> BalanceSummary:
    """
    Aggregate completed transfers

    Args:
        transfers: Any collection of transfers, possibly empty
        window: Optional period on created_at; None means all data
        predicate: Optional extra filter (single client, single account, ...)

    Returns:
        BalanceSummary; all zeros for an empty input
    """
    total_incoming = ZERO
    total_outgoing = ZERO
    total_commissions = ZERO
    count = 0

    for transfer in transfers:
        if transfer.status != TransferStatus.COMPLETED:
            continue
        if window is not None and not window.includes(transfer.created_at):
            continue
        if predicate is not None and not predicate(transfer):
            continue

        if transfer.transfer_type == TransferType.INCOMING:
            total_incoming += transfer.net_amount
        else:
            total_outgoing += transfer.net_amount
            total_commissions += transfer.commission_amount
        count += 1

    return BalanceSummary(total_incoming, total_outgoing, total_commissions, count)


def aggregate_for_client(transfers: Iterable[TransferRecord], client_id: str,
                         window: Optional[DateWindow] = None) -> BalanceSummary:
    """Balance of a single client"""
    return aggregate(transfers, window, lambda t: t.client_id == client_id)


def aggregate_for_account(transfers: Iterable[TransferRecord], account_id: str,
                          window: Optional[DateWindow] = None) -> BalanceSummary:
    """Balance of transfers touching a single bank account on either side"""
    return aggregate(transfers, window, lambda t: t.touches_account(account_id))
