"""
Ledger system wiring and request dependencies
"""

from typing import Optional

from fastapi import HTTPException

from ..audit import AuditTrail
from ..clients import ClientManager
from ..commission_rates import CommissionRateManager
from ..companies import CompanyManager
from ..config import get_config
from ..currency import Currency, format_amount
from ..errors import InvalidTransition, LedgerError, NotFoundError, UpstreamFailure, ValidationError
from ..ledger import TransferManager
from ..reporting import ReportingEngine
from ..storage import InMemoryStorage, SQLiteStorage


class LedgerSystem:
    """Transfer ledger with all components initialized"""

    def __init__(self, use_sqlite: Optional[bool] = None):
        config = get_config()
        self.currency = Currency.from_code(config.currency)
        self.default_commission_rate = config.default_commission_rate
        if use_sqlite is None:
            use_sqlite = config.storage_backend == "sqlite"

        # Initialize storage
        if use_sqlite:
            self.storage = SQLiteStorage(config.database_path)
        else:
            self.storage = InMemoryStorage()

        self.audit_trail = AuditTrail(self.storage, enabled=config.enable_audit_logging)
        self.client_manager = ClientManager(self.storage, self.audit_trail)
        self.company_manager = CompanyManager(self.storage, self.audit_trail)
        self.commission_rate_manager = CommissionRateManager(self.storage, self.audit_trail)
        self.transfer_manager = TransferManager(
            self.storage, self.client_manager, self.company_manager,
            self.audit_trail, tz=config.timezone
        )
        self.reporting_engine = ReportingEngine(
            self.transfer_manager, self.client_manager, self.company_manager,
            recent_limit=config.recent_transfers_limit
        )

    def commission_rate_for(self, requested: Optional[str]) -> str:
        """Rate sent by the client, or the configured default when omitted"""
        if requested is None or requested == "":
            return self.default_commission_rate
        return requested

    def format(self, amount) -> str:
        return format_amount(amount, self.currency)

    def close(self) -> None:
        self.storage.close()


# Global ledger system instance, created on first request
ledger_system: Optional[LedgerSystem] = None


def get_ledger_system() -> LedgerSystem:
    global ledger_system
    if ledger_system is None:
        ledger_system = LedgerSystem()
    return ledger_system


def http_error(exc: LedgerError) -> HTTPException:
    """Map a ledger error onto the HTTP status the client should see"""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidTransition):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, UpstreamFailure):
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
