"""Tradução de erros de domínio para respostas HTTP.

Corpo sempre no formato `{"error": {"kind", "message", "details"}}`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain.errors import BookingError, ValidationError

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "validation": 422,
    "not_found": 404,
    "role_mismatch": 422,
    "forbidden": 403,
    "invalid_transition": 409,
    "slot_conflict": 409,
    "horizon_violation": 422,
    "dependency_failure": 503,
}


def error_response(exc: BookingError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


async def _handle_booking_error(request: Request, exc: BookingError) -> JSONResponse:
    log = logger.error if exc.kind == "dependency_failure" else logger.info
    log(
        "booking_request_rejected",
        extra={
            "component": "bookings_api",
            "path": request.url.path,
            "method": request.method,
            "error_kind": exc.kind,
        },
    )
    return error_response(exc)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        key = loc[-1] if loc else "request"
        fields.setdefault(key, str(error.get("msg", "inválido")))
    return await _handle_booking_error(request, ValidationError(fields))


def register_error_handlers(app: FastAPI) -> None:
    """Registra handlers de BookingError e de validação do FastAPI."""
    app.add_exception_handler(BookingError, _handle_booking_error)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError,
        _handle_request_validation,  # type: ignore[arg-type]
    )
