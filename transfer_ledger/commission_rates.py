"""
Commission Rate Presets Module

Rates offered to the operator when recording an outgoing transfer. A
preset is only a suggestion: the transfer stores the rate actually used.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
import uuid

from .audit import AuditTrail, AuditEventType
from .currency import Numeric, to_decimal
from .errors import InvalidRate, NotFoundError
from .logging_config import get_logger, log_action
from .storage import StorageInterface, StorageRecord

MAX_RATE = Decimal('100')


@dataclass
class CommissionRate(StorageRecord):
    """Commission percentage preset"""
    rate: Decimal
    is_active: bool = True

    def __post_init__(self):
        self.rate = to_decimal(self.rate, InvalidRate, "rate")
        if self.rate < 0 or self.rate > MAX_RATE:
            raise InvalidRate("Commission rate must be between 0 and 100")


class CommissionRateManager:
    """Manages commission rate presets"""

    def __init__(self, storage: StorageInterface, audit_trail: AuditTrail):
        self.storage = storage
        self.audit_trail = audit_trail
        self.table_name = "commission_rates"
        self.logger = get_logger("transfer_ledger.commission_rates")

    def create_rate(self, rate: Numeric, is_active: bool = True) -> CommissionRate:
        now = datetime.now(timezone.utc)
        preset = CommissionRate(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            rate=rate,
            is_active=is_active
        )
        self.storage.save(self.table_name, preset.id, preset.to_dict())

        log_action(
            self.logger, "info", "Commission rate created",
            action="create_rate", resource=f"commission_rate:{preset.id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.COMMISSION_RATE_CREATED,
            entity_type="commission_rate",
            entity_id=preset.id,
            metadata={"rate": preset.rate, "is_active": preset.is_active}
        )
        return preset

    def get_rate(self, rate_id: str) -> Optional[CommissionRate]:
        data = self.storage.load(self.table_name, rate_id)
        if data:
            return CommissionRate.from_dict(data)
        return None

    def require_rate(self, rate_id: str) -> CommissionRate:
        preset = self.get_rate(rate_id)
        if not preset:
            raise NotFoundError("commission rate", rate_id)
        return preset

    def list_rates(self, active_only: bool = True) -> List[CommissionRate]:
        """Presets in ascending rate order"""
        rates = [CommissionRate.from_dict(data) for data in self.storage.load_all(self.table_name)]
        if active_only:
            rates = [r for r in rates if r.is_active]
        rates.sort(key=lambda r: (r.rate, r.created_at))
        return rates

    def update_rate(self, rate_id: str, rate: Optional[Numeric] = None,
                    is_active: Optional[bool] = None) -> CommissionRate:
        preset = self.require_rate(rate_id)
        updated = CommissionRate(
            id=preset.id,
            created_at=preset.created_at,
            updated_at=datetime.now(timezone.utc),
            rate=rate if rate is not None else preset.rate,
            is_active=is_active if is_active is not None else preset.is_active
        )
        self.storage.save(self.table_name, updated.id, updated.to_dict())

        log_action(
            self.logger, "info", "Commission rate updated",
            action="update_rate", resource=f"commission_rate:{updated.id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.COMMISSION_RATE_UPDATED,
            entity_type="commission_rate",
            entity_id=updated.id,
            metadata={
                "old_rate": preset.rate, "new_rate": updated.rate,
                "is_active": updated.is_active
            }
        )
        return updated

    def delete_rate(self, rate_id: str) -> None:
        preset = self.require_rate(rate_id)
        self.storage.delete(self.table_name, rate_id)

        log_action(
            self.logger, "info", "Commission rate deleted",
            action="delete_rate", resource=f"commission_rate:{rate_id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.COMMISSION_RATE_DELETED,
            entity_type="commission_rate",
            entity_id=rate_id,
            metadata={"rate": preset.rate}
        )
