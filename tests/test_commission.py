"""
Test suite for commission computation

Covers the net / gross / commission split for both transfer directions and
the rejection of unusable amounts and rates.
"""

import pytest
from decimal import Decimal

from transfer_ledger.commission import CommissionBreakdown, commission_rate, compute
from transfer_ledger.errors import InvalidAmount, InvalidRate, ValidationError
from transfer_ledger.transfers import TransferType


class TestCompute:
    """Test compute() for outgoing and incoming transfers"""

    def test_outgoing_adds_commission_on_top(self):
        """1000 at 5% costs the sender 1050"""
        breakdown = compute(Decimal('1000'), TransferType.OUTGOING, Decimal('5'))

        assert breakdown.net == Decimal('1000')
        assert breakdown.commission == Decimal('50')
        assert breakdown.gross == Decimal('1050')
        assert breakdown.commission_percentage == Decimal('5')

    def test_incoming_never_carries_commission(self):
        breakdown = compute(Decimal('500'), TransferType.INCOMING, Decimal('5'))

        assert breakdown == CommissionBreakdown(
            net=Decimal('500'), gross=Decimal('500'),
            commission=Decimal('0'), commission_percentage=Decimal('0')
        )

    def test_incoming_ignores_negative_rate(self):
        """The rate is discarded before it is validated"""
        breakdown = compute(Decimal('500'), TransferType.INCOMING, Decimal('-3'))
        assert breakdown.commission == Decimal('0')
        assert breakdown.gross == Decimal('500')

    def test_zero_rate_outgoing(self):
        breakdown = compute(Decimal('250.75'), TransferType.OUTGOING, Decimal('0'))
        assert breakdown.gross == breakdown.net == Decimal('250.75')
        assert breakdown.commission == Decimal('0')

    def test_string_inputs_are_accepted(self):
        breakdown = compute("200", "outgoing", "2.5")
        assert breakdown.gross == Decimal('205')
        assert breakdown.commission == Decimal('5')

    def test_float_inputs_go_through_str(self):
        breakdown = compute(0.1, TransferType.OUTGOING, 10)
        assert breakdown.net == Decimal('0.1')
        assert breakdown.commission == Decimal('0.01')

    def test_no_rounding_is_applied(self):
        """Sub-cent precision survives the computation"""
        breakdown = compute(Decimal('333.33'), TransferType.OUTGOING, Decimal('7.5'))
        assert breakdown.commission == Decimal('24.99975')
        assert breakdown.gross == Decimal('358.32975')

    @pytest.mark.parametrize("net, rate", [
        (Decimal('1000'), Decimal('5')),
        (Decimal('0.01'), Decimal('3')),
        (Decimal('123456.78'), Decimal('12.25')),
    ])
    def test_split_law(self, net, rate):
        """gross = net + commission and commission = net * rate / 100"""
        breakdown = compute(net, TransferType.OUTGOING, rate)
        assert breakdown.gross == breakdown.net + breakdown.commission
        assert breakdown.commission == net * rate / Decimal('100')


class TestComputeErrors:
    """Test rejection of invalid inputs"""

    @pytest.mark.parametrize("amount", [Decimal('0'), Decimal('-10'), "0", "-0.01"])
    def test_non_positive_amount(self, amount):
        with pytest.raises(InvalidAmount):
            compute(amount, TransferType.OUTGOING, Decimal('5'))

    @pytest.mark.parametrize("amount", ["abc", None, True, Decimal('NaN')])
    def test_non_numeric_amount(self, amount):
        with pytest.raises(InvalidAmount):
            compute(amount, TransferType.OUTGOING, Decimal('5'))

    @pytest.mark.parametrize("amount", ["1,500", "12 EUR", "€12"])
    def test_ambiguous_or_decorated_amount(self, amount):
        """Never silently read "1,500" as 1.5"""
        with pytest.raises(InvalidAmount):
            compute(amount, TransferType.OUTGOING, "5")

    def test_grouped_amount(self):
        breakdown = compute("1,500,000", TransferType.OUTGOING, "5")
        assert breakdown.net == Decimal('1500000')
        assert breakdown.gross == Decimal('1575000')

    def test_negative_rate_outgoing(self):
        with pytest.raises(InvalidRate):
            compute(Decimal('100'), TransferType.OUTGOING, Decimal('-1'))

    def test_non_numeric_rate_outgoing(self):
        with pytest.raises(InvalidRate):
            compute(Decimal('100'), TransferType.OUTGOING, "five")

    def test_unknown_transfer_type(self):
        with pytest.raises(ValidationError):
            compute(Decimal('100'), "sideways", Decimal('5'))

    def test_errors_are_value_errors(self):
        """Callers that only know ValueError still catch bad input"""
        with pytest.raises(ValueError):
            compute(Decimal('-1'), TransferType.OUTGOING)


class TestCommissionRate:
    def test_incoming_rate_is_zero(self):
        assert commission_rate(TransferType.INCOMING, Decimal('7')) == Decimal('0')

    def test_outgoing_rate_is_kept(self):
        assert commission_rate(TransferType.OUTGOING, "3.5") == Decimal('3.5')
