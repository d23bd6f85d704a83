"""
kart_api.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the shared
  components created at startup (token codec, cart aggregator).
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kart_api.auth.tokens import TokenCodec
from kart_api.services.account_service import AccountService
from kart_api.services.cart_service import CartAggregator
from kart_api.settings import Settings


def settings_from_app(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created on app startup in `kart_api.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def codec_from_app(request: Request) -> TokenCodec:
    return request.app.state.codec  # type: ignore[attr-defined]


def cart_from_app(request: Request) -> CartAggregator:
    return request.app.state.cart  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed by the service layer.
    async with session_factory() as session:
        yield session


def account_service(
    session: AsyncSession = Depends(db_session),
    codec: TokenCodec = Depends(codec_from_app),
    settings: Settings = Depends(settings_from_app),
) -> AccountService:
    return AccountService(session=session, codec=codec, settings=settings)
