"""
Bank Account Management Module

External bank accounts ("companies") that transfers debit and credit.
Each one is identified by its RIB, which must be unique across the book.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
import uuid
import re

from .audit import AuditTrail, AuditEventType
from .errors import NotFoundError, ValidationError
from .logging_config import get_logger, log_action
from .storage import StorageInterface, StorageRecord
from .transfers import TRANSFERS_TABLE


def normalize_rib(rib: str) -> str:
    """Collapse whitespace and upper-case a RIB"""
    return re.sub(r'\s+', ' ', (rib or "").strip()).upper()


@dataclass
class Company(StorageRecord):
    """Bank account held by a company"""
    name: str
    rib: str
    address: Optional[str] = None
    siret: Optional[str] = None

    def __post_init__(self):
        self.name = (self.name or "").strip()
        self.rib = normalize_rib(self.rib)
        if not self.name:
            raise ValidationError("Company name is required")
        if not self.rib:
            raise ValidationError("RIB is required")
        self.address = (self.address or "").strip() or None
        self.siret = (self.siret or "").strip() or None

    def matches(self, term: str) -> bool:
        term = term.strip().lower()
        return term in self.name.lower() or term in self.rib.lower()


class CompanyManager:
    """
    Manages bank accounts referenced by transfers
    """

    def __init__(self, storage: StorageInterface, audit_trail: AuditTrail):
        self.storage = storage
        self.audit_trail = audit_trail
        self.table_name = "companies"
        self.logger = get_logger("transfer_ledger.companies")

    def _ensure_unique_rib(self, rib: str, exclude_id: Optional[str] = None) -> None:
        for data in self.storage.find(self.table_name, {"rib": rib}):
            if data["id"] != exclude_id:
                raise ValidationError(f"RIB {rib} is already registered")

    def create_company(self, name: str, rib: str, address: Optional[str] = None,
                       siret: Optional[str] = None) -> Company:
        """
        Register a bank account

        Raises:
            ValidationError: If name/RIB are blank or the RIB already exists
        """
        now = datetime.now(timezone.utc)
        company = Company(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            name=name,
            rib=rib,
            address=address,
            siret=siret
        )
        self._ensure_unique_rib(company.rib)
        self.storage.save(self.table_name, company.id, company.to_dict())

        log_action(
            self.logger, "info", "Company account created",
            action="create_company", resource=f"company:{company.id}",
            extra={"name": company.name, "rib": company.rib}
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.COMPANY_CREATED,
            entity_type="company",
            entity_id=company.id,
            metadata={"name": company.name, "rib": company.rib}
        )
        return company

    def get_company(self, company_id: str) -> Optional[Company]:
        data = self.storage.load(self.table_name, company_id)
        if data:
            return Company.from_dict(data)
        return None

    def require_company(self, company_id: str) -> Company:
        company = self.get_company(company_id)
        if not company:
            raise NotFoundError("company", company_id)
        return company

    def list_companies(self) -> List[Company]:
        """All accounts, newest first"""
        companies = [Company.from_dict(data) for data in self.storage.load_all(self.table_name)]
        companies.sort(key=lambda c: c.created_at, reverse=True)
        return companies

    def search(self, term: str) -> List[Company]:
        """Case-insensitive match on name or RIB; blank term returns everything"""
        companies = self.list_companies()
        if not term or not term.strip():
            return companies
        return [company for company in companies if company.matches(term)]

    def update_company(self, company_id: str, name: Optional[str] = None,
                       rib: Optional[str] = None, address: Optional[str] = None,
                       siret: Optional[str] = None) -> Company:
        company = self.require_company(company_id)
        updated = Company(
            id=company.id,
            created_at=company.created_at,
            updated_at=datetime.now(timezone.utc),
            name=name if name is not None else company.name,
            rib=rib if rib is not None else company.rib,
            address=address if address is not None else company.address,
            siret=siret if siret is not None else company.siret
        )
        if updated.rib != company.rib:
            self._ensure_unique_rib(updated.rib, exclude_id=company.id)

        self.storage.save(self.table_name, updated.id, updated.to_dict())

        log_action(
            self.logger, "info", "Company account updated",
            action="update_company", resource=f"company:{updated.id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.COMPANY_UPDATED,
            entity_type="company",
            entity_id=updated.id,
            metadata={
                "old_data": {"name": company.name, "rib": company.rib},
                "new_data": {"name": updated.name, "rib": updated.rib}
            }
        )
        return updated

    def delete_company(self, company_id: str) -> None:
        """
        Delete a bank account

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If a transfer debits or credits it
        """
        company = self.require_company(company_id)
        in_use = (
            self.storage.find(TRANSFERS_TABLE, {"debit_account_id": company_id})
            or self.storage.find(TRANSFERS_TABLE, {"credit_account_id": company_id})
        )
        if in_use:
            raise ValidationError(f"Company {company_id} is used by transfers and cannot be deleted")

        self.storage.delete(self.table_name, company_id)

        log_action(
            self.logger, "info", "Company account deleted",
            action="delete_company", resource=f"company:{company_id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.COMPANY_DELETED,
            entity_type="company",
            entity_id=company_id,
            metadata={"name": company.name, "rib": company.rib}
        )
