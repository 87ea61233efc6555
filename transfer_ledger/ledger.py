"""
Transfer Ledger Module

Presentation-facing operations on transfers: creation from raw input,
reads filtered by client, account and period, note/date edits, status
changes, deletion and linked-balance queries. The arithmetic lives in the
pure modules (commission, linkage, aggregation, status, date_window);
this module wires them to storage, logging and the audit trail.
"""

from decimal import Decimal
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional, Union
import uuid

from .audit import AuditTrail, AuditEventType
from .clients import ClientManager
from .commission import compute
from .companies import CompanyManager
from .currency import Numeric
from .date_window import DateWindow, resolve_timezone
from .errors import MissingReference, NotFoundError, ValidationError
from .linkage import LinkageIndex
from .logging_config import get_logger, log_action
from .status import StatusMachine
from .storage import StorageInterface
from .transfers import (
    TRANSFERS_TABLE, TransferRecord, TransferStatus, TransferType,
    parse_status, parse_transfer_type
)

LedgerDate = Union[date, datetime, str, None]


def ledger_timestamp(value: LedgerDate, tz: str = "UTC") -> datetime:
    """
    Turn a user-supplied transfer date into the ledger created_at

    Date-only values land at midnight in the ledger timezone; naive
    datetimes are read in that timezone too. None means now.
    """
    zone = resolve_timezone(tz)
    if value is None or value == "":
        return datetime.now(timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat only understands a "Z" suffix from Python 3.11
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text) if len(text) > 10 else date.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid transfer date '{value}'")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=zone)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=zone)
    raise ValidationError("Transfer date must be a date or datetime")


def derive_transfer(
    client_id: str,
    debit_account_id: str,
    credit_account_id: str,
    amount: Numeric,
    transfer_type: Union[TransferType, str],
    status: Union[TransferStatus, str],
    commission_percentage: Numeric = Decimal('0'),
    parent_transfer_id: Optional[str] = None,
    note: Optional[str] = None,
    created_at: Optional[datetime] = None,
    transfer_id: Optional[str] = None
) -> TransferRecord:
    """
    Build a fully-derived TransferRecord from raw input, without storing it

    For outgoing transfers amount is the net amount the beneficiary
    receives; the stored amount is the gross including commission.

    Raises:
        ValidationError: On any invalid input (subclass says which)
    """
    transfer_type = parse_transfer_type(transfer_type)
    if status is None:
        raise ValidationError("Transfer status is required")
    status = parse_status(status)

    breakdown = compute(amount, transfer_type, commission_percentage)
    now = datetime.now(timezone.utc)

    return TransferRecord(
        id=transfer_id or str(uuid.uuid4()),
        created_at=created_at or now,
        updated_at=now,
        client_id=client_id,
        debit_account_id=debit_account_id,
        credit_account_id=credit_account_id,
        amount=breakdown.gross,
        transfer_type=transfer_type,
        commission_percentage=breakdown.commission_percentage,
        commission_amount=breakdown.commission,
        net_amount=breakdown.net,
        status=status,
        parent_transfer_id=parent_transfer_id or None,
        note=(note or "").strip() or None,
        recorded_at=now
    )


class TransferManager:
    """
    Records transfers and answers balance questions about them
    """

    def __init__(
        self,
        storage: StorageInterface,
        client_manager: ClientManager,
        company_manager: CompanyManager,
        audit_trail: AuditTrail,
        status_machine: Optional[StatusMachine] = None,
        tz: str = "UTC"
    ):
        self.storage = storage
        self.client_manager = client_manager
        self.company_manager = company_manager
        self.audit_trail = audit_trail
        self.status_machine = status_machine or StatusMachine()
        self.tz = tz
        self.table_name = TRANSFERS_TABLE
        self.logger = get_logger("transfer_ledger.transfers")

    def _save_transfer(self, transfer: TransferRecord) -> None:
        self.storage.save(self.table_name, transfer.id, transfer.to_dict())

    def _validate_references(self, transfer: TransferRecord) -> None:
        if not self.client_manager.get_client(transfer.client_id):
            raise MissingReference(f"Client {transfer.client_id} does not exist")
        for side in ("debit_account_id", "credit_account_id"):
            account_id = getattr(transfer, side)
            if not self.company_manager.get_company(account_id):
                raise MissingReference(f"Account {account_id} ({side}) does not exist")

    def _validate_parent(self, transfer: TransferRecord) -> Optional[TransferRecord]:
        if not transfer.parent_transfer_id:
            return None
        if transfer.transfer_type != TransferType.OUTGOING:
            raise ValidationError("Only outgoing transfers can draw from a parent transfer")

        parent = self.get_transfer(transfer.parent_transfer_id)
        if not parent:
            raise MissingReference(f"Parent transfer {transfer.parent_transfer_id} does not exist")
        if parent.transfer_type != TransferType.INCOMING:
            raise ValidationError(
                f"Parent transfer {parent.id} must be incoming, not {parent.transfer_type.value}"
            )
        if parent.client_id != transfer.client_id:
            raise ValidationError(f"Parent transfer {parent.id} belongs to another client")
        return parent

    def create_transfer(
        self,
        client_id: str,
        debit_account_id: str,
        credit_account_id: str,
        amount: Numeric,
        transfer_type: Union[TransferType, str],
        status: Union[TransferStatus, str],
        commission_percentage: Numeric = Decimal('0'),
        parent_transfer_id: Optional[str] = None,
        note: Optional[str] = None,
        transfer_date: LedgerDate = None
    ) -> TransferRecord:
        """
        Create and store a transfer

        Args:
            client_id: Client the transfer is recorded for
            debit_account_id: Account the money leaves
            credit_account_id: Account the money reaches
            amount: Net amount (outgoing) or received amount (incoming)
            transfer_type: incoming or outgoing
            status: Initial status chosen by the caller
            commission_percentage: Rate for outgoing transfers
            parent_transfer_id: Incoming transfer this one draws from
            note: Optional free text
            transfer_date: Ledger date; defaults to now

        Returns:
            Stored TransferRecord

        Raises:
            ValidationError: If the input or a reference is invalid
            UpstreamFailure: If storage fails; nothing is stored then
        """
        transfer = derive_transfer(
            client_id=client_id,
            debit_account_id=debit_account_id,
            credit_account_id=credit_account_id,
            amount=amount,
            transfer_type=transfer_type,
            status=status,
            commission_percentage=commission_percentage,
            parent_transfer_id=parent_transfer_id,
            note=note,
            created_at=ledger_timestamp(transfer_date, self.tz)
        )
        self._validate_references(transfer)

        with self.storage.atomic():
            parent = self._validate_parent(transfer)
            self._save_transfer(transfer)

        log_action(
            self.logger, "info", f"Transfer created: {transfer.transfer_type.value}",
            action="create_transfer", resource=f"transfer:{transfer.id}",
            extra={
                "client_id": transfer.client_id,
                "amount": str(transfer.amount),
                "net_amount": str(transfer.net_amount),
                "commission_amount": str(transfer.commission_amount),
                "status": transfer.status.value,
                "parent_transfer_id": transfer.parent_transfer_id
            }
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_CREATED,
            entity_type="transfer",
            entity_id=transfer.id,
            metadata={
                "client_id": transfer.client_id,
                "transfer_type": transfer.transfer_type,
                "amount": transfer.amount,
                "net_amount": transfer.net_amount,
                "commission_amount": transfer.commission_amount,
                "commission_percentage": transfer.commission_percentage,
                "status": transfer.status,
                "parent_transfer_id": transfer.parent_transfer_id
            }
        )

        if parent is not None:
            remaining = self.remaining_balance(parent.id)
            if remaining < 0:
                # Reported, not enforced: callers decide whether over-drawing is allowed
                log_action(
                    self.logger, "warning", "Parent transfer over-drawn",
                    action="overdraw_parent", resource=f"transfer:{parent.id}",
                    extra={"remaining_balance": str(remaining), "child_id": transfer.id}
                )

        return transfer

    def get_transfer(self, transfer_id: str) -> Optional[TransferRecord]:
        """Get transfer by ID"""
        data = self.storage.load(self.table_name, transfer_id)
        if data:
            return TransferRecord.from_dict(data)
        return None

    def require_transfer(self, transfer_id: str) -> TransferRecord:
        transfer = self.get_transfer(transfer_id)
        if not transfer:
            raise NotFoundError("transfer", transfer_id)
        return transfer

    def list_transfers(
        self,
        client_id: Optional[str] = None,
        account_id: Optional[str] = None,
        window: Optional[DateWindow] = None,
        status: Optional[Union[TransferStatus, str]] = None
    ) -> List[TransferRecord]:
        """
        Transfers matching every given filter, newest ledger date first

        account_id matches either the debit or the credit side.
        """
        filters: Dict[str, Any] = {}
        if client_id:
            filters["client_id"] = client_id
        if status:
            filters["status"] = parse_status(status).value

        transfers = [TransferRecord.from_dict(data) for data in self.storage.find(self.table_name, filters)]
        if account_id:
            transfers = [t for t in transfers if t.touches_account(account_id)]
        if window is not None:
            transfers = window.filter(transfers)

        transfers.sort(key=lambda t: (t.created_at, t.recorded_at or t.created_at), reverse=True)
        return transfers

    def get_transfer_details(self, transfer_id: str) -> Dict[str, Any]:
        """Transfer with its client and account display fields resolved"""
        transfer = self.require_transfer(transfer_id)
        return self.describe(transfer)

    def describe(self, transfer: TransferRecord) -> Dict[str, Any]:
        client = self.client_manager.get_client(transfer.client_id)
        debit = self.company_manager.get_company(transfer.debit_account_id)
        credit = self.company_manager.get_company(transfer.credit_account_id)
        return {
            "transfer": transfer,
            "client": {"id": client.id, "name": client.name} if client else None,
            "debit_company": {"id": debit.id, "name": debit.name, "rib": debit.rib} if debit else None,
            "credit_company": {"id": credit.id, "name": credit.name, "rib": credit.rib} if credit else None,
        }

    def update_transfer(self, transfer_id: str, created_at: LedgerDate = None,
                        note: Optional[str] = None) -> TransferRecord:
        """
        Edit the ledger date and/or the note

        Amounts, type, accounts and status are not editable here. An empty
        note clears it.
        """
        transfer = self.require_transfer(transfer_id)
        old_data = {"created_at": transfer.created_at, "note": transfer.note}

        if created_at is not None and created_at != "":
            transfer.created_at = ledger_timestamp(created_at, self.tz)
        if note is not None:
            transfer.note = note.strip() or None
        transfer.updated_at = datetime.now(timezone.utc)

        self._save_transfer(transfer)

        log_action(
            self.logger, "info", "Transfer updated",
            action="update_transfer", resource=f"transfer:{transfer.id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_UPDATED,
            entity_type="transfer",
            entity_id=transfer.id,
            metadata={
                "old_data": old_data,
                "new_data": {"created_at": transfer.created_at, "note": transfer.note}
            }
        )
        return transfer

    def update_status(self, transfer_id: str,
                      status: Union[TransferStatus, str]) -> TransferRecord:
        """
        Move a pending transfer to completed or failed

        Raises:
            NotFoundError: If the transfer does not exist
            InvalidTransition: If the move is not allowed; nothing is saved
        """
        transfer = self.require_transfer(transfer_id)
        updated = self.status_machine.apply(transfer, status)
        self._save_transfer(updated)

        log_action(
            self.logger, "info", f"Transfer status changed to {updated.status.value}",
            action="update_transfer_status", resource=f"transfer:{updated.id}",
            extra={"old_status": transfer.status.value, "new_status": updated.status.value}
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_STATUS_CHANGED,
            entity_type="transfer",
            entity_id=updated.id,
            metadata={"old_status": transfer.status, "new_status": updated.status}
        )
        return updated

    def delete_transfer(self, transfer_id: str) -> None:
        """
        Hard-delete a transfer

        Raises:
            NotFoundError: If the transfer does not exist
            ValidationError: If outgoing transfers still draw from it
        """
        transfer = self.require_transfer(transfer_id)
        if self.storage.find(self.table_name, {"parent_transfer_id": transfer_id}):
            raise ValidationError(
                f"Transfer {transfer_id} still funds linked transfers and cannot be deleted"
            )

        self.storage.delete(self.table_name, transfer_id)

        log_action(
            self.logger, "info", "Transfer deleted",
            action="delete_transfer", resource=f"transfer:{transfer_id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_DELETED,
            entity_type="transfer",
            entity_id=transfer_id,
            metadata={
                "client_id": transfer.client_id,
                "amount": transfer.amount,
                "status": transfer.status
            }
        )

    def linkage_index(self, client_id: Optional[str] = None) -> LinkageIndex:
        """Index over the current transfers, rebuilt on every call"""
        return LinkageIndex(self.list_transfers(client_id=client_id))

    def children_of(self, parent_id: str) -> List[TransferRecord]:
        """Outgoing transfers drawing from parent_id, oldest first"""
        self.require_transfer(parent_id)
        children = [
            TransferRecord.from_dict(data)
            for data in self.storage.find(self.table_name, {"parent_transfer_id": parent_id})
        ]
        return LinkageIndex(children).children_of(parent_id)

    def remaining_balance(self, parent_id: str) -> Decimal:
        """
        Balance left on an incoming transfer after its linked outgoing ones

        Raises:
            NotFoundError: If the parent does not exist
            ValidationError: If the parent is not incoming
        """
        parent = self.require_transfer(parent_id)
        children = [
            TransferRecord.from_dict(data)
            for data in self.storage.find(self.table_name, {"parent_transfer_id": parent_id})
        ]
        return LinkageIndex(children).remaining_balance(parent)
