"""
Custom exception hierarchy for Memoria.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

Taxonomy
--------
- EntityValidationError : a record is rejected before any write.
- StorageFailureError   : the engine failed (I/O, constraint violation).
- EntityNotFoundError   : an update or HTTP lookup names an id with no row.
                          Repository reads return None instead.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class MemoriaException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class EntityValidationError(MemoriaException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "ENTITY_VALIDATION_FAILED"

    def __init__(self, kind: str, reason: str):
        super().__init__(
            message=f"Invalid {kind} entry: {reason}",
            details={"kind": kind, "reason": reason},
        )


class StorageFailureError(MemoriaException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_FAILURE"

    def __init__(self, store: str, operation: str, cause: Exception | None = None):
        details: dict[str, Any] = {"store": store, "operation": operation}
        if cause is not None:
            details["cause"] = str(cause)
        super().__init__(
            message=f"Storage failure in {store} during {operation}.",
            details=details,
        )


class EntityNotFoundError(MemoriaException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "ENTITY_NOT_FOUND"

    def __init__(self, kind: str, entity_id: str):
        super().__init__(
            message=f"No {kind} found with id {entity_id}.",
            details={"kind": kind, "id": entity_id},
        )


class UnknownEntityKindError(MemoriaException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "UNKNOWN_ENTITY_KIND"

    def __init__(self, kind: str):
        super().__init__(
            message=f"Unknown entity kind: {kind}.",
            details={"kind": kind},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def memoria_exception_handler(request: Request, exc: MemoriaException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
