"""
Domain errors raised by the live session state machine, and their HTTP mapping.

Services raise these; routes stay thin and convert them with error_to_http().
Each error carries a user-facing `detail` that callers surface as-is.
"""
from __future__ import annotations

from fastapi import HTTPException, status


class LiveCommerceError(Exception):
    """Base class for rejected live-commerce operations."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidArgumentError(LiveCommerceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(LiveCommerceError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(LiveCommerceError):
    status_code = status.HTTP_404_NOT_FOUND


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins.
# ---------------------------------------------------------------------------

ERROR_RULES: list[tuple[type[LiveCommerceError], int]] = [
    (InvalidArgumentError, InvalidArgumentError.status_code),
    (ConflictError, ConflictError.status_code),
    (NotFoundError, NotFoundError.status_code),
]


def error_to_http(exc: LiveCommerceError) -> HTTPException:
    """Map a rejected operation to an HTTPException carrying its user-facing message."""
    for exc_type, status_code in ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=exc.detail)
    return HTTPException(status_code=exc.status_code, detail=exc.detail)
