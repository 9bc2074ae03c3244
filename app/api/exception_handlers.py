"""
Exception handlers for the FastAPI application.

Domain errors carry a machine-readable code; each code maps to an HTTP
status and a suggested client action.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.domain.exceptions import DomainException

logger = logging.getLogger(__name__)

# code -> (HTTP status, client action)
DOMAIN_ERROR_MAP: dict[str, tuple[int, str | None]] = {
    "INVALID_RANGE": (status.HTTP_400_BAD_REQUEST, "fix_request"),
    "VALIDATION_ERROR": (status.HTTP_400_BAD_REQUEST, "fix_request"),
    "SLOT_OVERLAP": (status.HTTP_409_CONFLICT, "choose_another_window"),
    "SLOT_LOCKED": (status.HTTP_409_CONFLICT, "cancel_appointment_first"),
    "SLOT_UNAVAILABLE": (status.HTTP_409_CONFLICT, "refetch_slots"),
    "INVALID_TRANSITION": (status.HTTP_409_CONFLICT, "refresh_appointment"),
    "ATTACHMENT_NOT_FOUND": (status.HTTP_404_NOT_FOUND, "refresh_record"),
    "ENTITY_NOT_FOUND": (status.HTTP_404_NOT_FOUND, "refresh"),
    "AUTHORIZATION_ERROR": (status.HTTP_403_FORBIDDEN, None),
}


def _error_body(
    status_code: int,
    message: str,
    code: str,
    details: object = None,
    action: str | None = None,
) -> dict:
    return {
        "error": True,
        "code": code,
        "message": message,
        "details": details if details is not None else {},
        "action": action,
        "status_code": status_code,
    }


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate a DomainException into its mapped status and action."""
    if not isinstance(exc, DomainException):
        return await global_exception_handler(request, exc)

    status_code, action = DOMAIN_ERROR_MAP.get(exc.code, (status.HTTP_400_BAD_REQUEST, None))
    log_level = logging.INFO if status_code < 500 else logging.ERROR
    logger.log(log_level, f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=_error_body(status_code, exc.message, exc.code, exc.details, action),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException (including routing 404/405) with the same response envelope."""
    http_exc = exc if isinstance(exc, StarletteHTTPException) else StarletteHTTPException(500, str(exc))
    return JSONResponse(
        status_code=http_exc.status_code,
        content=_error_body(http_exc.status_code, str(http_exc.detail), "HTTP_ERROR"),
        headers=http_exc.headers,
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Request body and query errors are reported as 400 VALIDATION_ERROR."""
    errors = []
    if isinstance(exc, RequestValidationError):
        for error in exc.errors():
            errors.append(
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            "VALIDATION_ERROR",
            {"errors": errors},
            "fix_request",
        ),
    )


async def database_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc!s}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error", "DATABASE_ERROR"),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and returns a safe error response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
