"""
Client Management Module

Clients on whose behalf transfers are recorded. A client's balance is not
stored: it is always aggregated from its completed transfers.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
import uuid
import re

from .audit import AuditTrail, AuditEventType
from .errors import NotFoundError, ValidationError
from .logging_config import get_logger, log_action
from .storage import StorageInterface, StorageRecord
from .transfers import TRANSFERS_TABLE

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


@dataclass
class Client(StorageRecord):
    """Client profile"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Client name is required")

        self.email = (self.email or "").strip() or None
        self.phone = (self.phone or "").strip() or None
        if self.email and not re.match(EMAIL_PATTERN, self.email):
            raise ValidationError("Invalid email format")


class ClientManager:
    """
    Manages client lifecycle
    """

    def __init__(self, storage: StorageInterface, audit_trail: AuditTrail):
        self.storage = storage
        self.audit_trail = audit_trail
        self.table_name = "clients"
        self.logger = get_logger("transfer_ledger.clients")

    def create_client(self, name: str, email: Optional[str] = None,
                      phone: Optional[str] = None) -> Client:
        """
        Create a new client

        Args:
            name: Display name
            email: Optional email address
            phone: Optional phone number

        Returns:
            Created Client object
        """
        now = datetime.now(timezone.utc)
        client = Client(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            name=name,
            email=email,
            phone=phone
        )

        self.storage.save(self.table_name, client.id, client.to_dict())

        log_action(
            self.logger, "info", "Client created",
            action="create_client", resource=f"client:{client.id}",
            extra={"name": client.name}
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.CLIENT_CREATED,
            entity_type="client",
            entity_id=client.id,
            metadata={"name": client.name, "email": client.email}
        )
        return client

    def get_client(self, client_id: str) -> Optional[Client]:
        """Get client by ID"""
        data = self.storage.load(self.table_name, client_id)
        if data:
            return Client.from_dict(data)
        return None

    def require_client(self, client_id: str) -> Client:
        client = self.get_client(client_id)
        if not client:
            raise NotFoundError("client", client_id)
        return client

    def list_clients(self) -> List[Client]:
        """All clients, newest first"""
        clients = [Client.from_dict(data) for data in self.storage.load_all(self.table_name)]
        clients.sort(key=lambda c: c.created_at, reverse=True)
        return clients

    def update_client(self, client_id: str, name: Optional[str] = None,
                      email: Optional[str] = None, phone: Optional[str] = None) -> Client:
        """Update client information; None leaves a field unchanged"""
        client = self.require_client(client_id)
        old_data = {"name": client.name, "email": client.email, "phone": client.phone}

        updated = Client(
            id=client.id,
            created_at=client.created_at,
            updated_at=datetime.now(timezone.utc),
            name=name if name is not None else client.name,
            email=email if email is not None else client.email,
            phone=phone if phone is not None else client.phone
        )
        self.storage.save(self.table_name, updated.id, updated.to_dict())

        log_action(
            self.logger, "info", "Client updated",
            action="update_client", resource=f"client:{updated.id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.CLIENT_UPDATED,
            entity_type="client",
            entity_id=updated.id,
            metadata={
                "old_data": old_data,
                "new_data": {"name": updated.name, "email": updated.email, "phone": updated.phone}
            }
        )
        return updated

    def delete_client(self, client_id: str) -> None:
        """
        Delete a client

        Raises:
            NotFoundError: If the client does not exist
            ValidationError: If transfers still reference the client
        """
        client = self.require_client(client_id)
        if self.storage.find(TRANSFERS_TABLE, {"client_id": client_id}):
            raise ValidationError(f"Client {client_id} still has transfers and cannot be deleted")

        self.storage.delete(self.table_name, client_id)

        log_action(
            self.logger, "info", "Client deleted",
            action="delete_client", resource=f"client:{client_id}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.CLIENT_DELETED,
            entity_type="client",
            entity_id=client_id,
            metadata={"name": client.name}
        )
