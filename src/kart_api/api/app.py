"""
kart_api.api.app

FastAPI app factory for the Kart backend.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Construct the token codec and session guard once, from explicit settings,
  failing fast when the signing secret is missing.
- Initialize and dispose shared infrastructure (DB engine, session factory,
  cart store).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from kart_api import __version__
from kart_api.api.errors import register_exception_handlers
from kart_api.api.routers.auth import router as auth_router
from kart_api.api.routers.cart import router as cart_router
from kart_api.api.routers.health import router as health_router
from kart_api.api.routers.users import router as users_router
from kart_api.auth.guard import SessionGuard
from kart_api.auth.tokens import TokenCodec, TokenConfig
from kart_api.db.init_db import init_db
from kart_api.db.repositories.carts import SqlCartStore
from kart_api.db.session import create_engine, create_sessionmaker
from kart_api.errors import ConfigurationError
from kart_api.observability.logging import configure_logging, get_logger
from kart_api.observability.middleware import RequestContextMiddleware
from kart_api.services.cart_service import CartAggregator
from kart_api.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    if not settings.jwt_secret:
        if not settings.allow_missing_jwt_secret:
            raise ConfigurationError("KART_JWT_SECRET must be set")
        log.warning("jwt_secret_missing", detail="authenticated routes will return 500")

    codec = TokenCodec(TokenConfig(secret=settings.jwt_secret, alg=settings.jwt_alg))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.cart = CartAggregator(
            SqlCartStore(app.state.sessionmaker),
            max_attempts=settings.cart_max_write_attempts,
        )
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Kart API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.codec = codec
    app.state.guard = SessionGuard(codec, admin_email=settings.admin_email)

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(cart_router)

    return app


# --- Module Notes -----------------------------------------------------------
# CORS is configured by the deployment (ingress / reverse proxy), not here.
