"""ASGI application for the EduPath onboarding API.

Wires the onboarding API together: structlog level, security headers,
CORS, the error envelope handlers, the session sweeper lifespan, the
/api/v1 router and a health check.

Run with ``uvicorn edupath.main:app --app-dir backend``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from edupath.api.v1.router import router as v1_router
from edupath.core.config import settings
from edupath.core.errors import APIError
from edupath.core.responses import ErrorResponse
from edupath.services.onboarding_steps import DEFAULT_REGISTRY
from edupath.services.session_store import get_session_store
from edupath.services.session_sweeper import SessionSweeper

logger = structlog.get_logger()

_SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # JSON only: nothing to load, nothing may frame us
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response.

    Onboarding views carry GPA, test scores and loan amounts, so anything
    under /api/ is marked no-store. HSTS is only sent in production, where
    TLS terminates at the proxy.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, max-age=0"
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Render any APIError with its own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.build(exc.code, exc.message, exc.details),
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed body or query parameters -> 400 VALIDATION_ERROR.

    FastAPI's default is 422, which this API reserves for
    INVALID_STATE_TRANSITION.
    """
    details = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=ErrorResponse.build(
            "VALIDATION_ERROR", "Request validation failed", details
        ),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure and return a generic 500 with no internal detail."""
    logger.exception("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse.build("INTERNAL_ERROR", "An unexpected error occurred"),
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Run the expired-session sweeper for the lifetime of the app."""
    sweeper = SessionSweeper(
        get_session_store(), interval_seconds=settings.session_sweep_interval_seconds
    )
    logger.info(
        "app_startup",
        environment=settings.environment,
        llm_provider=settings.llm_provider,
        step_count=len(DEFAULT_REGISTRY),
    )
    sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


def create_app() -> FastAPI:
    """Build the app; tests call this to get a fresh instance."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        )
    )

    app = FastAPI(
        title="EduPath Onboarding API",
        version="1.0.0",
        description="Guided onboarding and university matching for study abroad",
        lifespan=lifespan,
    )

    # Starlette runs middleware LIFO; CORS is added last so preflights
    # are answered before anything else runs
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "healthy"}

    return app


app = create_app()
