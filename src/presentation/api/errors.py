"""
Exception handlers mapping domain errors to HTTP responses.

Routes let domain exceptions propagate; the status code depends only on
the exception class. Bodies have the shape {"error", "message", "details"}.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from src.domain.exceptions import (AuthenticationException,
                                   AuthorizationException,
                                   NoSlotsAvailableError,
                                   PermissionDeniedError, RbacException,
                                   ResourceNotFoundException,
                                   RoleCreationFailedError,
                                   RoleNotFoundOrInactiveError,
                                   TenantNotFoundException,
                                   ValidationException)
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Checked in order; the first matching class wins
STATUS_BY_EXCEPTION: list[tuple[type[RbacException], int]] = [
    (AuthenticationException, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationException, status.HTTP_403_FORBIDDEN),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (TenantNotFoundException, status.HTTP_404_NOT_FOUND),
    (ResourceNotFoundException, status.HTTP_404_NOT_FOUND),
    (RoleNotFoundOrInactiveError, status.HTTP_404_NOT_FOUND),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (NoSlotsAvailableError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (RoleCreationFailedError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: RbacException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def rbac_exception_handler(request: Request, exc: RbacException) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique constraint races (alias, slot position, assignment) surface as conflicts"""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "CONFLICT",
            "message": "The change conflicts with a concurrent update. Please retry.",
            "details": {},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Store-level detail goes to the log only"""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred", "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RbacException, rbac_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
