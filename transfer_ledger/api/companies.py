"""
Bank account (company) endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends

from .system import LedgerSystem, get_ledger_system, http_error
from .schemas import CreateCompanyRequest, UpdateCompanyRequest, company_to_dict
from ..errors import LedgerError


router = APIRouter()


@router.post("", status_code=201)
async def create_company(
    request: CreateCompanyRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Register a bank account"""
    try:
        company = system.company_manager.create_company(
            name=request.name, rib=request.rib,
            address=request.address, siret=request.siret
        )
    except LedgerError as e:
        raise http_error(e)

    return {"company_id": company.id, "message": "Company created successfully"}


@router.get("")
async def list_companies(
    search: Optional[str] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """List bank accounts, optionally matching a name or RIB fragment"""
    companies = system.company_manager.search(search or "")
    return {"companies": [company_to_dict(c) for c in companies]}


@router.get("/{company_id}")
async def get_company(
    company_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        company = system.company_manager.require_company(company_id)
    except LedgerError as e:
        raise http_error(e)

    return company_to_dict(company)


@router.patch("/{company_id}")
async def update_company(
    company_id: str,
    request: UpdateCompanyRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        company = system.company_manager.update_company(
            company_id, name=request.name, rib=request.rib,
            address=request.address, siret=request.siret
        )
    except LedgerError as e:
        raise http_error(e)

    return {"company": company_to_dict(company), "message": "Company updated successfully"}


@router.delete("/{company_id}")
async def delete_company(
    company_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        system.company_manager.delete_company(company_id)
    except LedgerError as e:
        raise http_error(e)

    return {"company_id": company_id, "message": "Company deleted successfully"}
