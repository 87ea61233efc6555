"""
Commission rate preset endpoints
"""

from fastapi import APIRouter, Depends

from .system import LedgerSystem, get_ledger_system, http_error
from .schemas import CreateCommissionRateRequest, UpdateCommissionRateRequest, rate_to_dict
from ..errors import LedgerError


router = APIRouter()


@router.post("", status_code=201)
async def create_commission_rate(
    request: CreateCommissionRateRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        preset = system.commission_rate_manager.create_rate(request.rate, request.is_active)
    except LedgerError as e:
        raise http_error(e)

    return {"rate_id": preset.id, "rate": str(preset.rate)}


@router.get("")
async def list_commission_rates(
    include_inactive: bool = False,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Active presets in ascending order"""
    rates = system.commission_rate_manager.list_rates(active_only=not include_inactive)
    return {"rates": [rate_to_dict(r) for r in rates]}


@router.patch("/{rate_id}")
async def update_commission_rate(
    rate_id: str,
    request: UpdateCommissionRateRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        preset = system.commission_rate_manager.update_rate(
            rate_id, rate=request.rate, is_active=request.is_active
        )
    except LedgerError as e:
        raise http_error(e)

    return rate_to_dict(preset)


@router.delete("/{rate_id}")
async def delete_commission_rate(
    rate_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        system.commission_rate_manager.delete_rate(rate_id)
    except LedgerError as e:
        raise http_error(e)

    return {"rate_id": rate_id, "message": "Commission rate deleted successfully"}
