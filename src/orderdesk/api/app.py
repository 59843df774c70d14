"""
orderdesk.api.app

FastAPI app factory for the order service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory,
  identity service client).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orderdesk.api.errors import install_error_handlers
from orderdesk.api.routers.health import router as health_router
from orderdesk.api.routers.orders import router as orders_router
from orderdesk.api.routers.users import router as users_router
from orderdesk.auth.identity import FirebaseIdentityProvider, IdentityProvider, build_http_client
from orderdesk.db.init_db import init_db
from orderdesk.db.session import create_engine, create_sessionmaker
from orderdesk.observability.logging import configure_logging, get_logger
from orderdesk.observability.middleware import RequestContextMiddleware
from orderdesk.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, identity: IdentityProvider | None = None) -> FastAPI:
    """
    `identity` overrides the identity service client (tests, local stubs);
    by default a Firebase-compatible client is created on startup.
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)

        if identity is not None:
            app.state.identity = identity
            app.state.http = None
        else:
            http = build_http_client(settings)
            app.state.http = http
            app.state.identity = FirebaseIdentityProvider(settings=settings, http=http)

        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)

        try:
            yield
        finally:
            if app.state.http is not None:
                await app.state.http.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="orderdesk",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(users_router)
    app.include_router(orders_router)

    return app


# --- Module Notes -----------------------------------------------------------
# The reverse-proxy catch-all of the public website is deployed separately and
# is intentionally not mounted here.
