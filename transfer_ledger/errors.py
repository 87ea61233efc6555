"""
Ledger Error Taxonomy

Every failure the ledger surfaces to its callers. Validation problems are
ValueError subclasses so they read like the rest of the standard library,
lookups failures are LookupError subclasses.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors"""


class ValidationError(LedgerError, ValueError):
    """Bad input: surfaced verbatim to the caller, never retried"""


class InvalidAmount(ValidationError):
    """Amount is missing, non-numeric, or not strictly positive"""


class InvalidRate(ValidationError):
    """Commission percentage is missing, non-numeric, or negative"""


class InvalidAccounts(ValidationError):
    """Debit and credit accounts are identical or unusable"""


class MissingReference(ValidationError):
    """A referenced client, account or parent transfer does not exist"""


class NotFoundError(LedgerError, LookupError):
    """Requested record does not exist"""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type.capitalize()} {entity_id} not found")


class InvalidTransition(LedgerError):
    """Illegal status change; the record is left untouched"""

    def __init__(self, current, requested, transfer_id: Optional[str] = None):
        self.current = current
        self.requested = requested
        self.transfer_id = transfer_id
        current_value = getattr(current, "value", current)
        requested_value = getattr(requested, "value", requested)
        subject = f"Transfer {transfer_id}" if transfer_id else "Transfer"
        super().__init__(
            f"{subject} cannot move from '{current_value}' to '{requested_value}'"
        )


class UpstreamFailure(LedgerError):
    """The persistence backend failed; the original error is the __cause__"""
