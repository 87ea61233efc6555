"""
Reporting endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends

from .system import LedgerSystem, get_ledger_system, http_error
from .schemas import summary_to_dict, transfers_to_list
from .transfers import window_from_query
from ..errors import LedgerError


router = APIRouter()


@router.get("/dashboard")
async def dashboard(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Period summary, status distribution, monthly activity and recent transfers"""
    try:
        window = window_from_query(system, start_date, end_date)
        data = system.reporting_engine.dashboard(window)
    except LedgerError as e:
        raise http_error(e)

    return {
        "period": data["label"],
        "currency": system.currency.code,
        "summary": summary_to_dict(data["summary"]),
        "net_balance_display": system.format(data["summary"].net_balance),
        "status_distribution": data["status_distribution"],
        "monthly_activity": [m.to_dict() for m in data["monthly_activity"]],
        "recent_transfers": transfers_to_list(data["recent_transfers"])
    }


@router.get("/commissions")
async def commissions(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Commission earned per debit account, highest first"""
    try:
        window = window_from_query(system, start_date, end_date)
        entries = system.reporting_engine.commissions_by_account(window)
    except LedgerError as e:
        raise http_error(e)

    return {
        "period": window.label(),
        "accounts": [
            {
                "company_id": entry.company.id,
                "name": entry.company.name,
                "rib": entry.company.rib,
                "total_commissions": str(entry.total_commissions),
                "transfer_count": entry.transfer_count,
                "last_transfer_date": (
                    entry.last_transfer_date.isoformat() if entry.last_transfer_date else None
                )
            }
            for entry in entries
        ]
    }
