"""
Client endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends

from .system import LedgerSystem, get_ledger_system, http_error
from .schemas import (
    CreateClientRequest, UpdateClientRequest, client_to_dict, summary_to_dict, transfers_to_list
)
from .transfers import window_from_query
from ..errors import LedgerError


router = APIRouter()


@router.post("", status_code=201)
async def create_client(
    request: CreateClientRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Create a client"""
    try:
        client = system.client_manager.create_client(
            name=request.name, email=request.email, phone=request.phone
        )
    except LedgerError as e:
        raise http_error(e)

    return {"client_id": client.id, "message": "Client created successfully"}


@router.get("")
async def list_clients(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """List clients with their balance over the period"""
    try:
        window = window_from_query(system, start_date, end_date)
        balances = system.reporting_engine.client_balances(window)
    except LedgerError as e:
        raise http_error(e)

    return {
        "period": window.label(),
        "clients": [
            {**client_to_dict(entry.client), "balance": summary_to_dict(entry.summary)}
            for entry in balances
        ]
    }


@router.get("/{client_id}")
async def get_client(
    client_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Client statement: balance, transfers and open incoming funds"""
    try:
        window = window_from_query(system, start_date, end_date)
        statement = system.reporting_engine.client_statement(client_id, window)
    except LedgerError as e:
        raise http_error(e)

    return {
        "client": client_to_dict(statement.client),
        "period": window.label(),
        "balance": summary_to_dict(statement.summary),
        "transfers": transfers_to_list(statement.transfers),
        "incoming": [
            {
                "transfer_id": entry.transfer.id,
                "net_amount": str(entry.transfer.net_amount),
                "remaining_balance": str(entry.remaining_balance),
                "children": [child.id for child in entry.children]
            }
            for entry in statement.incoming
        ]
    }


@router.patch("/{client_id}")
async def update_client(
    client_id: str,
    request: UpdateClientRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Update client information"""
    try:
        client = system.client_manager.update_client(
            client_id, name=request.name, email=request.email, phone=request.phone
        )
    except LedgerError as e:
        raise http_error(e)

    return {"client": client_to_dict(client), "message": "Client updated successfully"}


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Delete a client without transfers"""
    try:
        system.client_manager.delete_client(client_id)
    except LedgerError as e:
        raise http_error(e)

    return {"client_id": client_id, "message": "Client deleted successfully"}
