"""
Error taxonomy for payment reconciliation.

Every failure leaving the reconciliation core is one of these kinds. The
HTTP layer maps ``status_code`` straight onto the response.
"""

from typing import Any, Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation failures."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InputInvalidError(ReconciliationError):
    """Missing or malformed tenant/payment identifier."""

    status_code = 400


class NotFoundError(ReconciliationError):
    """Record does not exist in the tenant's scope."""

    status_code = 404


class TransientError(ReconciliationError):
    """Data-access failure that may succeed on a later attempt."""

    status_code = 503


class ConcurrencyConflictError(TransientError):
    """The invoice was consumed by another payment before commit."""

    status_code = 409


class InternalError(ReconciliationError):
    """Invariant violation detected inside the core."""

    status_code = 500
