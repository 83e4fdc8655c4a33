"""
Mapping of service exceptions to HTTP responses
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.services.exceptions import (
    AlreadyDecided,
    AlreadyTerminal,
    DomainError,
    Forbidden,
    IllegalTransition,
    InfrastructureError,
    InvalidToken,
    MemberInactive,
    NotFound,
    SelfReferral,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching base class wins
DOMAIN_ERROR_STATUS = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (SelfReferral, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (AlreadyDecided, status.HTTP_409_CONFLICT),
    (AlreadyTerminal, status.HTTP_409_CONFLICT),
    (IllegalTransition, status.HTTP_409_CONFLICT),
    (MemberInactive, status.HTTP_409_CONFLICT),
    (InvalidToken, status.HTTP_400_BAD_REQUEST),
    (Forbidden, status.HTTP_403_FORBIDDEN),
]


def status_for(exc: DomainError) -> int:
    for exc_type, status_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def infrastructure_error_handler(request: Request, exc: InfrastructureError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable", "error": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)
