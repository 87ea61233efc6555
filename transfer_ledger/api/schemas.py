"""
Pydantic schemas for API requests and responses

Amounts and rates travel as strings so no float ever touches them.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..aggregation import BalanceSummary
from ..companies import Company
from ..clients import Client
from ..commission_rates import CommissionRate
from ..transfers import TransferRecord


# Transfer schemas
class CreateTransferRequest(BaseModel):
    client_id: str
    debit_account_id: str
    credit_account_id: str
    amount: str = Field(..., description="Net amount for outgoing, received amount for incoming")
    transfer_type: str = Field(..., description="incoming or outgoing")
    status: str = Field(..., description="pending, completed or failed")
    commission_percentage: Optional[str] = Field(None, description="Defaults to the configured rate")
    parent_transfer_id: Optional[str] = None
    note: Optional[str] = None
    transfer_date: Optional[str] = Field(None, description="ISO date or datetime")


class PreviewCommissionRequest(BaseModel):
    amount: str
    transfer_type: str = Field(..., description="incoming or outgoing")
    commission_percentage: Optional[str] = None


class UpdateTransferRequest(BaseModel):
    created_at: Optional[str] = Field(None, description="New ledger date (ISO)")
    note: Optional[str] = None


class UpdateStatusRequest(BaseModel):
    status: str = Field(..., description="completed or failed")


# Client schemas
class CreateClientRequest(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class UpdateClientRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


# Company schemas
class CreateCompanyRequest(BaseModel):
    name: str
    rib: str
    address: Optional[str] = None
    siret: Optional[str] = None


class UpdateCompanyRequest(BaseModel):
    name: Optional[str] = None
    rib: Optional[str] = None
    address: Optional[str] = None
    siret: Optional[str] = None


# Commission rate schemas
class CreateCommissionRateRequest(BaseModel):
    rate: str
    is_active: bool = True


class UpdateCommissionRateRequest(BaseModel):
    rate: Optional[str] = None
    is_active: Optional[bool] = None


def transfer_to_dict(transfer: TransferRecord) -> Dict[str, Any]:
    data = transfer.to_dict()
    data["gross_amount"] = str(transfer.gross_amount)
    return data


def transfers_to_list(transfers: List[TransferRecord]) -> List[Dict[str, Any]]:
    return [transfer_to_dict(t) for t in transfers]


def client_to_dict(client: Client) -> Dict[str, Any]:
    return client.to_dict()


def company_to_dict(company: Company) -> Dict[str, Any]:
    return company.to_dict()


def rate_to_dict(rate: CommissionRate) -> Dict[str, Any]:
    return rate.to_dict()


def summary_to_dict(summary: BalanceSummary) -> Dict[str, Any]:
    return summary.to_dict()
