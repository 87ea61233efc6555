"""
Transfer endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends

from .system import LedgerSystem, get_ledger_system, http_error
from .schemas import (
    CreateTransferRequest, PreviewCommissionRequest, UpdateTransferRequest, UpdateStatusRequest,
    transfer_to_dict, transfers_to_list
)
from ..commission import compute
from ..date_window import DateWindow
from ..errors import LedgerError


router = APIRouter()


def window_from_query(system: LedgerSystem, start_date: Optional[str],
                      end_date: Optional[str]) -> DateWindow:
    return DateWindow.from_strings(start_date, end_date, tz=system.transfer_manager.tz)


@router.post("", status_code=201)
async def create_transfer(
    request: CreateTransferRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Record a transfer"""
    try:
        transfer = system.transfer_manager.create_transfer(
            client_id=request.client_id,
            debit_account_id=request.debit_account_id,
            credit_account_id=request.credit_account_id,
            amount=request.amount,
            transfer_type=request.transfer_type,
            status=request.status,
            commission_percentage=system.commission_rate_for(request.commission_percentage),
            parent_transfer_id=request.parent_transfer_id,
            note=request.note,
            transfer_date=request.transfer_date
        )
    except LedgerError as e:
        raise http_error(e)

    return {
        "transfer_id": transfer.id,
        "transfer": transfer_to_dict(transfer),
        "message": "Transfer created successfully"
    }


@router.post("/preview")
async def preview_commission(
    request: PreviewCommissionRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Net / gross / commission split without recording anything"""
    try:
        breakdown = compute(
            request.amount, request.transfer_type,
            system.commission_rate_for(request.commission_percentage)
        )
    except LedgerError as e:
        raise http_error(e)

    return {
        "net": str(breakdown.net),
        "gross": str(breakdown.gross),
        "commission": str(breakdown.commission),
        "commission_percentage": str(breakdown.commission_percentage)
    }


@router.get("")
async def list_transfers(
    client_id: Optional[str] = None,
    account_id: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """List transfers, newest first"""
    try:
        window = window_from_query(system, start_date, end_date)
        transfers = system.transfer_manager.list_transfers(
            client_id=client_id, account_id=account_id, window=window, status=status
        )
    except LedgerError as e:
        raise http_error(e)

    return {
        "period": window.label(),
        "transfers": transfers_to_list(transfers),
        "count": len(transfers)
    }


@router.get("/{transfer_id}")
async def get_transfer(
    transfer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get a transfer with its client and accounts"""
    try:
        details = system.transfer_manager.get_transfer_details(transfer_id)
    except LedgerError as e:
        raise http_error(e)

    details["transfer"] = transfer_to_dict(details["transfer"])
    return details


@router.patch("/{transfer_id}")
async def update_transfer(
    transfer_id: str,
    request: UpdateTransferRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Edit the ledger date or note"""
    try:
        transfer = system.transfer_manager.update_transfer(
            transfer_id, created_at=request.created_at, note=request.note
        )
    except LedgerError as e:
        raise http_error(e)

    return {"transfer": transfer_to_dict(transfer), "message": "Transfer updated successfully"}


@router.post("/{transfer_id}/status")
async def update_transfer_status(
    transfer_id: str,
    request: UpdateStatusRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Complete or fail a pending transfer"""
    try:
        transfer = system.transfer_manager.update_status(transfer_id, request.status)
    except LedgerError as e:
        raise http_error(e)

    return {
        "transfer_id": transfer.id,
        "status": transfer.status.value,
        "message": "Transfer status updated successfully"
    }


@router.delete("/{transfer_id}")
async def delete_transfer(
    transfer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Delete a transfer"""
    try:
        system.transfer_manager.delete_transfer(transfer_id)
    except LedgerError as e:
        raise http_error(e)

    return {"transfer_id": transfer_id, "message": "Transfer deleted successfully"}


@router.get("/{transfer_id}/remaining-balance")
async def get_remaining_balance(
    transfer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Balance left on an incoming transfer"""
    try:
        remaining = system.transfer_manager.remaining_balance(transfer_id)
        children = system.transfer_manager.children_of(transfer_id)
    except LedgerError as e:
        raise http_error(e)

    return {
        "transfer_id": transfer_id,
        "remaining_balance": str(remaining),
        "children": transfers_to_list(children)
    }
