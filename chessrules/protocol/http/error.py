from __future__ import annotations

import logging
from typing import Any, Dict, cast

from fastapi import HTTPException as FastAPIHTTPException
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from ...errors import (
    ChessRulesError,
    EngineError,
    IllegalWhileTerminal,
    PromotionPending,
)


logger = logging.getLogger(__name__)


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: list[dict[str, str]] | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _render(
    request: Request,
    status_code: int,
    message: str,
    field_errors: list[dict[str, str]] | None = None,
) -> JSONResponse:
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=message,
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=getattr(request.state, "request_id", ""),
        field_errors=field_errors,
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _render(request, exc.status_code, detail)
    return await exception_handler(request, exc)


async def rules_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map engine errors: game state conflicts → 409, engine failure → 502, else 400."""
    err = cast(ChessRulesError, exc)
    if isinstance(err, (IllegalWhileTerminal, PromotionPending)):
        return _render(request, status.HTTP_409_CONFLICT, str(err))
    if isinstance(err, EngineError):
        logger.warning(
            "external engine failure",
            extra={"request_id": getattr(request.state, "request_id", "")},
        )
        return _render(request, status.HTTP_502_BAD_GATEWAY, str(err))
    return _render(request, status.HTTP_400_BAD_REQUEST, str(err))


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    if isinstance(exc, FastAPIHTTPException):
        return await http_exception_handler(request, exc)
    logger.exception("Unhandled exception", extra={"request_id": request_id})
    return _render(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Render body/query validation failures as 422 with one entry per field."""
    fields = [_field_error(e) for e in cast(RequestValidationError, exc).errors()]
    return _render(
        request,
        422,
        "Validation error",
        field_errors=fields or None,
    )


def _field_error(err: Dict[str, Any]) -> dict[str, str]:
    return {
        "field": ".".join(str(p) for p in err.get("loc", ()) if p is not None),
        "code": str(err.get("type", "value_error")),
        "message": str(err.get("msg", "invalid value")),
    }


_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "unprocessable_entity",
    502: "engine_unavailable",
}


def _status_to_code(status_code: int) -> str:
    if status_code in _CODES:
        return _CODES[status_code]
    return "internal_error" if 500 <= status_code < 600 else "error"
