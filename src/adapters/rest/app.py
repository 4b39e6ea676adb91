"""
FastAPI application: REST adapter for the banana API.

Usage:
    banana-api serve

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 4000 --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.sessions import SessionMiddleware

from infrastructure.config import Settings, configure_logging
from factory import ServiceFactory
from adapters.rest.errors import register_error_handlers
from adapters.rest.middleware import access_log, security_headers
from adapters.rest.routers import auth, banana, oracle, terms

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    factory: Optional[ServiceFactory] = None,
) -> FastAPI:
    """Build the application. Tests pass their own settings and factory."""
    settings = settings or (factory.config if factory else Settings.from_env())
    factory = factory or ServiceFactory(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize ServiceFactory on startup."""
        configure_logging(settings)
        await factory.initialize()
        logger.info("Banana API ready on port %d (%s)", settings.port, settings.environment)
        yield
        # aiosqlite connections are per-operation; nothing to close

    app = FastAPI(
        title="The Invention of the Banana API",
        version=API_VERSION,
        description="Banana catalog, Oracle and accounts for the banana invention site.",
        lifespan=lifespan,
    )
    app.state.factory = factory

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        strategy="moving-window",
    )
    app.state.limiter = limiter

    # Added innermost first: the rate limiter sees requests after CORS and sessions
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.effective_session_secret,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.middleware("http")(security_headers)
    app.middleware("http")(access_log)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted({settings.frontend_url.rstrip("/"), "http://localhost:3000"}),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, hide_internal=settings.is_production)

    app.include_router(banana.router)
    app.include_router(auth.router)
    app.include_router(terms.router)
    app.include_router(oracle.router)

    @app.get("/health", tags=["health"])
    @limiter.exempt
    async def health(request: Request):
        connected = await factory.connection.ping()
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if connected else "disconnected",
        }

    return app


# `uvicorn adapters.rest.app:app` entry point; configured from the environment
app = create_app()
