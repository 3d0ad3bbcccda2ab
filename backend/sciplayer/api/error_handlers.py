"""Error Handlers: global exception handlers mapping every failure to {"error": ...}.

Invariants:
    - SciplayerError: 4xx keeps its message, 5xx collapses to "internal server error"
    - RequestValidationError: 400 with the first field message
    - HTTPException (routing 404/405): same envelope, headers preserved; 405 Allow
      lists every method registered for the path
    - Exception (catch-all): never leaks internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from sciplayer.core.errors import INTERNAL_ERROR_MESSAGE, SciplayerError

logger = logging.getLogger(__name__)

INVALID_JSON_MESSAGE = "invalid JSON payload"

_HTTP_ERROR_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method not allowed",
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_sciplayer_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_sciplayer_error_handler(app: FastAPI) -> None:

    @app.exception_handler(SciplayerError)
    async def sciplayer_error_handler(request: Request, exc: SciplayerError):
        """Handle all SciPlayer domain/storage errors."""
        extra = {
            "error_code": exc.code,
            "path": request.url.path,
            "device_id": exc.context.device_id,
            "operation": exc.context.operation,
        }
        if exc.is_client_error:
            logger.info(f"SciplayerError: {exc.message}", extra=extra)
        else:
            logger.error(f"SciplayerError: {exc.message}", extra=extra, exc_info=exc)
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": validation_message(exc.errors())},
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Routing errors (unknown path, wrong method) in the error envelope."""
        headers = dict(exc.headers or {})
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            headers["Allow"] = ", ".join(
                allowed_methods(request, headers.get("Allow")),
            )
        message = _HTTP_ERROR_MESSAGES.get(exc.status_code)
        if message is None:
            message = exc.detail if isinstance(exc.detail, str) else INTERNAL_ERROR_MESSAGE
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=headers or None,
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": INTERNAL_ERROR_MESSAGE},
        )


def validation_message(errors: list[dict] | tuple) -> str:
    """Turn the first Pydantic error into the client-facing message."""
    if not errors:
        return INVALID_JSON_MESSAGE
    first = errors[0]
    loc = tuple(first.get("loc", ()))
    err_type = first.get("type", "")
    if err_type == "json_invalid" or len(loc) < 2:
        return INVALID_JSON_MESSAGE
    field = str(loc[-1])
    if err_type == "missing":
        return f"{field} is required"
    if err_type == "value_error":
        cause = first.get("ctx", {}).get("error")
        if cause is not None:
            return str(cause)
    if err_type == "string_type":
        return f"{field} must be a string"
    return f"{field} is invalid"


def allowed_methods(request: Request, fallback: str | None = None) -> list[str]:
    """Every method any route registers for the request path, sorted.

    Included routers are walked recursively; fallback (Starlette's own Allow
    value for the first matching route) is merged in.
    """
    methods: set[str] = set()
    _collect_methods(request.app.router.routes, request.scope, methods)
    if fallback:
        methods.update(m.strip() for m in fallback.split(",") if m.strip())
    return sorted(methods)


def _collect_methods(routes, scope: dict, methods: set[str]) -> None:
    for route in routes:
        nested = getattr(route, "original_router", None)
        if nested is not None:
            _collect_methods(nested.routes, scope, methods)
            continue
        match, _ = route.matches(scope)
        if match in (Match.FULL, Match.PARTIAL):
            methods.update(getattr(route, "methods", None) or ())
