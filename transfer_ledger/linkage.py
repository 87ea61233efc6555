"""
Transfer Linkage Module

Resolves how much of an incoming transfer is still available once the
outgoing transfers linked to it are accounted for. Children encumber their
parent whatever their status, so a pending disbursement already reduces
the balance shown to the operator.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from .errors import ValidationError
from .transfers import TransferRecord, TransferType


def _require_incoming(parent: TransferRecord) -> None:
    if parent.transfer_type != TransferType.INCOMING:
        raise ValidationError(
            f"Transfer {parent.id} is {parent.transfer_type.value}; only incoming transfers can be parents"
        )


class LinkageIndex:
    """
    Parent → children index over a snapshot of transfers

    Build a new index (or call rebuild) whenever the working collection
    changes; lookups are then dictionary hits instead of full scans.
    """

    def __init__(self, transfers: Iterable[TransferRecord] = ()):
        self._by_id: Dict[str, TransferRecord] = {}
        self._children: Dict[str, Set[str]] = {}
        self.rebuild(transfers)

    @classmethod
    def build(cls, transfers: Iterable[TransferRecord]) -> 'LinkageIndex':
        return cls(transfers)

    def rebuild(self, transfers: Iterable[TransferRecord]) -> None:
        """Replace the indexed snapshot"""
        self._by_id = {}
        self._children = {}
        for transfer in transfers:
            self._by_id[transfer.id] = transfer
            if transfer.parent_transfer_id and transfer.transfer_type == TransferType.OUTGOING:
                self._children.setdefault(transfer.parent_transfer_id, set()).add(transfer.id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, transfer_id: str) -> bool:
        return transfer_id in self._by_id

    def get(self, transfer_id: str) -> Optional[TransferRecord]:
        return self._by_id.get(transfer_id)

    def child_ids(self, parent_id: str) -> Set[str]:
        return set(self._children.get(parent_id, ()))

    def children_of(self, parent_id: str) -> List[TransferRecord]:
        """Outgoing transfers drawing from parent_id, oldest first"""
        children = [self._by_id[child_id] for child_id in self._children.get(parent_id, ())]
        children.sort(key=lambda t: (t.created_at, t.id))
        return children

    def has_children(self, parent_id: str) -> bool:
        return bool(self._children.get(parent_id))

    def parent_of(self, child: TransferRecord) -> Optional[TransferRecord]:
        if not child.parent_transfer_id:
            return None
        return self._by_id.get(child.parent_transfer_id)

    def encumbered(self, parent: TransferRecord) -> Decimal:
        """Total drawn from parent: net plus commission of every child"""
        _require_incoming(parent)
        return sum(
            (child.net_amount + child.commission_amount for child in self.children_of(parent.id)),
            Decimal('0')
        )

    def remaining_balance(self, parent: TransferRecord) -> Decimal:
        """Signed balance left on parent; negative means over-drawn"""
        return parent.net_amount - self.encumbered(parent)


def remaining_balance(parent: TransferRecord, all_transfers: Iterable[TransferRecord]) -> Decimal:
    """
    Remaining usable balance of an incoming transfer

    Args:
        parent: Incoming transfer
        all_transfers: Collection that may contain its children

    Returns:
        parent.net_amount minus net + commission of every linked outgoing transfer
    """
    return LinkageIndex(all_transfers).remaining_balance(parent)
