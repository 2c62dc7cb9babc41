"""Error kinds raised by ledger services.

Each kind is an ``HTTPException`` so services raise them exactly like any
other HTTP error; the application handler adds the machine-readable
``error`` field to the response body.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import HTTPException, status


class LedgerError(HTTPException):
    """Base class for business-rule failures reported to the caller."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "internal_error"

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=self.http_status, detail=detail)

    def payload(self) -> dict[str, object]:
        return {"detail": self.detail, "error": self.kind}


class NotFoundError(LedgerError):
    """Referenced entity is absent."""

    http_status = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class InvalidArgumentError(LedgerError):
    """Input is malformed or out of range."""

    http_status = status.HTTP_400_BAD_REQUEST
    kind = "invalid_argument"


class FailedPreconditionError(LedgerError):
    """A business rule blocks the action."""

    http_status = status.HTTP_400_BAD_REQUEST
    kind = "failed_precondition"


class ConflictError(LedgerError):
    """Uniqueness or referential restriction violated."""

    http_status = status.HTTP_409_CONFLICT
    kind = "conflict"


class ResourceExhaustedError(LedgerError):
    """Daily hour cap would be exceeded."""

    http_status = status.HTTP_400_BAD_REQUEST
    kind = "resource_exhausted"

    def __init__(self, detail: str, *, already_logged_hours: Decimal) -> None:
        super().__init__(detail)
        self.already_logged_hours = already_logged_hours

    def payload(self) -> dict[str, object]:
        body = super().payload()
        body["already_logged_hours"] = str(self.already_logged_hours)
        return body
