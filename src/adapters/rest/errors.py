"""
Exception → HTTP response mapping.

Every error body has the shape ``{"error": CODE, "message": text}``, plus
a few extra keys for the quota and terms errors.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.exceptions import (
    AuthenticationError,
    DomainError,
    DuplicateLoginError,
    NotFoundError,
    ProviderNotEnabledError,
    QuotaExhaustedError,
    RepositoryError,
    StoreUnavailableError,
    TermsNotAcceptedError,
    TokenExpiredError,
    TokenInvalidError,
    UpstreamUnavailableError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

# Most specific first
_DOMAIN_ERRORS: list[tuple[type[DomainError], int, str]] = [
    (TokenExpiredError, status.HTTP_401_UNAUTHORIZED, "TOKEN_EXPIRED"),
    (TokenInvalidError, status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN"),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED"),
    (TermsNotAcceptedError, status.HTTP_403_FORBIDDEN, "TERMS_NOT_ACCEPTED"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (ProviderNotEnabledError, status.HTTP_404_NOT_FOUND, "PROVIDER_NOT_ENABLED"),
    (ValidationFailure, status.HTTP_400_BAD_REQUEST, "VALIDATION_FAILED"),
    (DuplicateLoginError, status.HTTP_409_CONFLICT, "CONFLICT"),
    (QuotaExhaustedError, status.HTTP_429_TOO_MANY_REQUESTS, "QUOTA_EXHAUSTED"),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "UPSTREAM_UNAVAILABLE"),
    (UpstreamUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "UPSTREAM_UNAVAILABLE"),
    (RepositoryError, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"),
]


def error_response(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": code, "message": message, **extra},
    )


def classify(exc: DomainError) -> tuple[int, str]:
    for exc_type, status_code, code in _DOMAIN_ERRORS:
        if isinstance(exc, exc_type):
            return status_code, code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"


def register_error_handlers(app: FastAPI, hide_internal: bool) -> None:
    """Attach all exception handlers to ``app``."""

    async def domain_error(request: Request, exc: DomainError) -> JSONResponse:
        status_code, code = classify(exc)
        extra = {}
        if isinstance(exc, QuotaExhaustedError):
            extra = {
                "queriesRemaining": 0,
                "resetAt": exc.reset_at.isoformat() if exc.reset_at else None,
            }
        elif isinstance(exc, TermsNotAcceptedError):
            extra = {"termsRequired": True}

        message = str(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            if hide_internal and status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
                message = "Something went wrong!"
        return error_response(status_code, code, message, **extra)

    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return error_response(
            status.HTTP_400_BAD_REQUEST, "VALIDATION_FAILED", "Invalid request.", details=details,
        )

    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return error_response(exc.status_code, "NOT_FOUND", "Endpoint not found")
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return error_response(exc.status_code, "METHOD_NOT_ALLOWED", str(exc.detail))
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Something went wrong!" if hide_internal else str(exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message)

    app.add_exception_handler(DomainError, domain_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded)
    app.add_exception_handler(Exception, unhandled_error)


def rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Called synchronously by SlowAPIMiddleware."""
    logger.warning("Rate limit hit by %s on %s", request.client.host if request.client else "?", request.url.path)
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "RATE_LIMITED",
        f"Too many requests from this IP, please try again later. ({exc.detail})",
    )
