"""
Transfer Record Module

The canonical ledger entity: one directed money movement between two
external bank accounts on behalf of a client. Derived amount fields are
validated on construction, so an instance that exists is consistent.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Dict, Optional, Any
from enum import Enum

from .currency import to_decimal
from .errors import (
    ValidationError, InvalidAmount, InvalidRate, InvalidAccounts, MissingReference
)
from .storage import StorageRecord, parse_timestamp

TRANSFERS_TABLE = "transfers"

# Absolute tolerance for the derived-field identities
AMOUNT_TOLERANCE = Decimal('1e-9')


class TransferType(Enum):
    """Direction of a transfer relative to the managed accounts"""
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class TransferStatus(Enum):
    """Lifecycle states of a transfer"""
    PENDING = "pending"        # Submitted, not yet real money
    COMPLETED = "completed"    # Counts toward financial totals
    FAILED = "failed"          # Never counts


def parse_transfer_type(value: Any) -> TransferType:
    if isinstance(value, TransferType):
        return value
    try:
        return TransferType(value)
    except ValueError:
        raise ValidationError(f"Unknown transfer type '{value}'")


def parse_status(value: Any) -> TransferStatus:
    if isinstance(value, TransferStatus):
        return value
    try:
        return TransferStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown transfer status '{value}'")


@dataclass
class TransferRecord(StorageRecord):
    """
    Transfer between a debit and a credit account

    created_at is the ledger date used for period filtering and ordering;
    recorded_at is when the system stored the record.
    """
    client_id: str
    debit_account_id: str
    credit_account_id: str
    amount: Decimal                    # Gross: net + commission for outgoing
    transfer_type: TransferType
    commission_percentage: Decimal
    commission_amount: Decimal
    net_amount: Decimal
    status: TransferStatus
    parent_transfer_id: Optional[str] = None
    note: Optional[str] = None
    recorded_at: Optional[datetime] = None

    def __post_init__(self):
        self.transfer_type = parse_transfer_type(self.transfer_type)
        self.status = parse_status(self.status)
        self.amount = to_decimal(self.amount, InvalidAmount, "amount")
        self.net_amount = to_decimal(self.net_amount, InvalidAmount, "net_amount")
        self.commission_amount = to_decimal(self.commission_amount, InvalidAmount, "commission_amount")
        self.commission_percentage = to_decimal(
            self.commission_percentage, InvalidRate, "commission_percentage"
        )

        for field_name in ("client_id", "debit_account_id", "credit_account_id"):
            if not getattr(self, field_name):
                raise MissingReference(f"{field_name} is required")

        if self.debit_account_id == self.credit_account_id:
            raise InvalidAccounts("Debit and credit accounts must be different")

        if self.amount <= 0:
            raise InvalidAmount("Transfer amount must be positive")

        if self.commission_percentage < 0:
            raise InvalidRate("Commission percentage cannot be negative")

        if self.transfer_type == TransferType.INCOMING:
            if self.commission_percentage != 0 or self.commission_amount != 0:
                raise InvalidRate("Incoming transfers cannot carry a commission")
            if self.net_amount != self.amount:
                raise InvalidAmount("Incoming transfer net amount must equal its amount")
            if self.parent_transfer_id:
                raise ValidationError("Only outgoing transfers can draw from a parent transfer")
        else:
            if abs(self.net_amount + self.commission_amount - self.amount) > AMOUNT_TOLERANCE:
                raise InvalidAmount("Outgoing amount must equal net amount plus commission")
            expected = self.net_amount * self.commission_percentage / Decimal('100')
            if abs(expected - self.commission_amount) > AMOUNT_TOLERANCE:
                raise InvalidAmount("Commission amount does not match commission percentage")

        if self.parent_transfer_id and self.parent_transfer_id == self.id:
            raise ValidationError("A transfer cannot be its own parent")

    @property
    def gross_amount(self) -> Decimal:
        """Total debited, commission included"""
        return self.amount

    @property
    def is_incoming(self) -> bool:
        return self.transfer_type == TransferType.INCOMING

    @property
    def is_outgoing(self) -> bool:
        return self.transfer_type == TransferType.OUTGOING

    @property
    def is_completed(self) -> bool:
        return self.status == TransferStatus.COMPLETED

    @property
    def is_pending(self) -> bool:
        return self.status == TransferStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status != TransferStatus.PENDING

    def touches_account(self, account_id: str) -> bool:
        """True when the account is on either side of the transfer"""
        return account_id in (self.debit_account_id, self.credit_account_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransferRecord':
        data = dict(data)
        for key in ("created_at", "updated_at", "recorded_at"):
            if data.get(key):
                data[key] = parse_timestamp(data[key])
        return cls(**data)
