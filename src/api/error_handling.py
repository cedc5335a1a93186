from __future__ import annotations

import logging
from http import HTTPStatus
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from api.modules.ranking.repository import SnapshotReadConflictError

logger = logging.getLogger("api.errors")

_ERROR_CODES: dict[int, str] = {
    400: "bad_request",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
    503: "service_unavailable",
}


def _resolve_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return str(uuid4())


def status_to_error_code(status_code: int) -> str:
    code = _ERROR_CODES.get(status_code)
    if code is not None:
        return code
    if 500 <= status_code <= 599:
        return "internal_error"
    return f"http_{status_code}"


def _build_error_body(
    *,
    status_code: int,
    request_id: str,
    detail: object,
    details: object | None = None,
) -> dict[str, object]:
    message = detail if isinstance(detail, str) else HTTPStatus(status_code).phrase
    body: dict[str, object] = {
        "error_code": status_to_error_code(status_code),
        "message": message,
        "detail": detail,
        "request_id": request_id,
    }
    if details is not None:
        body["details"] = details
    return body


def _error_response(request: Request, status_code: int, detail: object) -> JSONResponse:
    body = _build_error_body(
        status_code=status_code,
        request_id=_resolve_request_id(request),
        detail=detail,
    )
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    @app.middleware("http")
    async def attach_request_id(
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        incoming_request_id = request.headers.get("x-request-id")
        request.state.request_id = incoming_request_id or str(uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        request_id = _resolve_request_id(request)
        detail = exc.detail if exc.detail is not None else HTTPStatus(exc.status_code).phrase
        details = detail if isinstance(detail, (dict, list)) else None
        body = _build_error_body(
            status_code=exc.status_code,
            request_id=request_id,
            detail=detail,
            details=details,
        )
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        body = _build_error_body(
            status_code=422,
            request_id=_resolve_request_id(request),
            detail="Validation failed",
            details=exc.errors(),
        )
        return JSONResponse(status_code=422, content=body)

    # Domain errors that escape a router: LookupError is a missing entity,
    # ValueError a rejected input.
    @app.exception_handler(LookupError)
    async def lookup_error_handler(request: Request, exc: LookupError) -> JSONResponse:
        return _error_response(request, 404, str(exc) or "Not found")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return _error_response(request, 400, str(exc) or "Bad request")

    @app.exception_handler(SnapshotReadConflictError)
    async def snapshot_conflict_handler(
        request: Request,
        exc: SnapshotReadConflictError,
    ) -> JSONResponse:
        logger.warning(
            "ranking_snapshot_busy",
            extra={"path": request.url.path, "request_id": _resolve_request_id(request)},
        )
        return _error_response(request, 503, str(exc))

    @app.exception_handler(OperationalError)
    @app.exception_handler(DBAPIError)
    @app.exception_handler(OSError)
    async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.warning(
            "database_unavailable",
            extra={
                "path": request.url.path,
                "error": type(exc).__name__,
                "request_id": _resolve_request_id(request),
            },
        )
        return _error_response(request, 503, "Database unavailable")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            exc_info=exc,
            extra={"path": request.url.path, "request_id": _resolve_request_id(request)},
        )
        return _error_response(request, 500, "Internal server error")
