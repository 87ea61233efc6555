"""
Commission Calculation Module

Turns a raw (amount, type, rate) triple into the net / gross / commission
split stored on a transfer. For outgoing transfers the caller's amount is
what the beneficiary receives; the commission is added on top.
"""

from decimal import Decimal
from dataclasses import dataclass

from .currency import Numeric, to_decimal
from .errors import InvalidAmount, InvalidRate
from .transfers import TransferType, parse_transfer_type

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class CommissionBreakdown:
    """Result of a commission computation"""
    net: Decimal
    gross: Decimal
    commission: Decimal
    commission_percentage: Decimal


def commission_rate(transfer_type: TransferType, commission_percentage: Numeric) -> Decimal:
    """Effective rate: incoming transfers never carry a commission"""
    if parse_transfer_type(transfer_type) == TransferType.INCOMING:
        return Decimal('0')
    rate = to_decimal(commission_percentage, InvalidRate, "commission_percentage")
    if rate < 0:
        raise InvalidRate("Commission percentage cannot be negative")
    return rate


def compute(amount: Numeric, transfer_type: TransferType,
            commission_percentage: Numeric = Decimal('0')) -> CommissionBreakdown:
    """
    Split an amount into net, gross and commission

    Args:
        amount: Net amount for outgoing transfers, received amount for incoming
        transfer_type: Direction of the transfer
        commission_percentage: Rate in percent, ignored for incoming transfers

    Returns:
        CommissionBreakdown with exact Decimal values

    Raises:
        InvalidAmount: If amount is not strictly positive
        InvalidRate: If an outgoing commission_percentage is negative
    """
    transfer_type = parse_transfer_type(transfer_type)
    net = to_decimal(amount, InvalidAmount, "amount")
    if net <= 0:
        raise InvalidAmount("Transfer amount must be positive")

    # Whatever rate the caller sent is discarded for incoming transfers
    if transfer_type == TransferType.INCOMING:
        return CommissionBreakdown(
            net=net, gross=net, commission=Decimal('0'),
            commission_percentage=Decimal('0')
        )

    rate = commission_rate(transfer_type, commission_percentage)
    gross = net * (1 + rate / HUNDRED)
    return CommissionBreakdown(
        net=net,
        gross=gross,
        commission=gross - net,
        commission_percentage=rate
    )
