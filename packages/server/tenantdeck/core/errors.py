"""
Typed service failures.

Services raise these before mutating anything; the handler registered in
``tenantdeck.main`` renders them as ``{"error": {"code", "message"}}``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError


class ServiceError(HTTPException):
    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message


class ConflictError(ServiceError):
    status_code = 409
    code = "CONFLICT"


class ForbiddenError(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class InternalFailureError(ServiceError):
    status_code = 500
    code = "INTERNAL_SERVER_ERROR"


@contextmanager
def conflict_on_integrity_error(message: str) -> Iterator[None]:
    """Re-map a unique-constraint violation raised by the store to ConflictError."""
    try:
        yield
    except IntegrityError as exc:
        raise ConflictError(message) from exc
