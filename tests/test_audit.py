"""
Tests for the hash-chained audit trail
"""

from decimal import Decimal

from transfer_ledger.audit import AuditEventType, AuditTrail
from transfer_ledger.storage import InMemoryStorage
from transfer_ledger.transfers import TransferStatus


class TestAuditTrail:
    """Test audit logging and integrity verification"""

    def setup_method(self):
        """Set up test fixtures"""
        self.storage = InMemoryStorage()
        self.audit_trail = AuditTrail(self.storage)

    def _log(self, entity_id="t-1", event_type=AuditEventType.TRANSFER_CREATED, **metadata):
        return self.audit_trail.log_event(
            event_type=event_type,
            entity_type="transfer",
            entity_id=entity_id,
            metadata=metadata
        )

    def test_log_event(self):
        event = self._log(amount=Decimal('1050'), status=TransferStatus.PENDING)

        assert event.sequence == 1
        assert event.previous_hash == ""
        assert event.verify_hash()
        assert event.metadata == {"amount": "1050", "status": "pending"}

    def test_events_are_chained(self):
        first = self._log("t-1")
        second = self._log("t-2")
        third = self._log("t-1", AuditEventType.TRANSFER_STATUS_CHANGED)

        assert second.sequence == 2
        assert second.previous_hash == first.current_hash
        assert third.previous_hash == second.current_hash

    def test_get_events_for_entity(self):
        self._log("t-1")
        self._log("t-2")
        self._log("t-1", AuditEventType.TRANSFER_STATUS_CHANGED)

        events = self.audit_trail.get_events_for_entity("transfer", "t-1")
        assert [e.event_type for e in events] == [
            AuditEventType.TRANSFER_CREATED, AuditEventType.TRANSFER_STATUS_CHANGED
        ]

    def test_get_all_events_with_limit(self):
        for i in range(5):
            self._log(f"t-{i}")

        events = self.audit_trail.get_all_events(limit=2)
        assert [e.entity_id for e in events] == ["t-3", "t-4"]
        assert self.audit_trail.count_events() == 5

    def test_integrity_of_untouched_chain(self):
        for i in range(3):
            self._log(f"t-{i}", amount=Decimal(i))

        result = self.audit_trail.verify_integrity()
        assert result["valid"] is True
        assert result["total_events"] == 3
        assert result["hash_errors"] == []
        assert result["chain_breaks"] == []

    def test_tampered_metadata_is_detected(self):
        event = self._log("t-1", amount=Decimal('100'))
        self._log("t-2")

        data = self.storage.load("audit_events", event.id)
        data["metadata"]["amount"] = "1"
        self.storage.save("audit_events", event.id, data)

        result = self.audit_trail.verify_integrity()
        assert result["valid"] is False
        assert result["hash_errors"][0]["event_id"] == event.id

    def test_deleted_event_breaks_chain(self):
        self._log("t-1")
        middle = self._log("t-2")
        self._log("t-3")

        self.storage.delete("audit_events", middle.id)

        result = self.audit_trail.verify_integrity()
        assert result["valid"] is False
        assert len(result["chain_breaks"]) == 1

    def test_disabled_trail_records_nothing(self):
        trail = AuditTrail(self.storage, enabled=False)
        assert trail.log_event(AuditEventType.CLIENT_CREATED, "client", "c-1") is None
        assert trail.count_events() == 0
