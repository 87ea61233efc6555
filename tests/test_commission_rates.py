"""
Tests for commission rate presets
"""

import logging

import pytest
from decimal import Decimal

from transfer_ledger.audit import AuditTrail
from transfer_ledger.commission_rates import CommissionRateManager
from transfer_ledger.errors import InvalidRate, NotFoundError
from transfer_ledger.storage import InMemoryStorage


class TestCommissionRateManager:
    def setup_method(self):
        self.storage = InMemoryStorage()
        self.manager = CommissionRateManager(self.storage, AuditTrail(self.storage))

    def test_create_and_list_ascending(self):
        self.manager.create_rate("5")
        self.manager.create_rate("2.5")
        self.manager.create_rate("10")

        assert [r.rate for r in self.manager.list_rates()] == [
            Decimal('2.5'), Decimal('5'), Decimal('10')
        ]

    @pytest.mark.parametrize("rate", ["-1", "100.01", "abc"])
    def test_invalid_rate(self, rate):
        with pytest.raises(InvalidRate):
            self.manager.create_rate(rate)

    def test_bounds_are_inclusive(self):
        assert self.manager.create_rate("0").rate == Decimal('0')
        assert self.manager.create_rate("100").rate == Decimal('100')

    def test_inactive_rates_are_hidden_by_default(self):
        self.manager.create_rate("5")
        self.manager.create_rate("7", is_active=False)

        assert [r.rate for r in self.manager.list_rates()] == [Decimal('5')]
        assert len(self.manager.list_rates(active_only=False)) == 2

    def test_update_rate(self):
        preset = self.manager.create_rate("5")
        updated = self.manager.update_rate(preset.id, is_active=False)

        assert updated.rate == Decimal('5')
        assert updated.is_active is False
        assert self.manager.require_rate(preset.id).is_active is False

    def test_changes_are_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="transfer_ledger.commission_rates")
        preset = self.manager.create_rate("5")
        self.manager.update_rate(preset.id, rate="4")
        self.manager.delete_rate(preset.id)

        records = [r for r in caplog.records if r.name == "transfer_ledger.commission_rates"]
        assert [r.action for r in records] == ["create_rate", "update_rate", "delete_rate"]
        assert all(r.levelno == logging.INFO for r in records)
        assert {r.resource for r in records} == {f"commission_rate:{preset.id}"}

    def test_delete_rate(self):
        preset = self.manager.create_rate("5")
        self.manager.delete_rate(preset.id)

        with pytest.raises(NotFoundError):
            self.manager.require_rate(preset.id)
        with pytest.raises(NotFoundError):
            self.manager.delete_rate(preset.id)
