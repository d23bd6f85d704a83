"""
tests.conftest

Shared fixtures: test settings, an app with its lifespan running, and an
in-process HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from kart_api.api.app import create_app
from kart_api.settings import Settings

ADMIN_EMAIL = "admin@kart.io"
ADMIN_PASSWORD = "admin-pass-123"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        jwt_secret="test-secret-with-enough-length-for-hs256",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'kart.db'}",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        cookie_secure=False,
        cookie_samesite="lax",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def register(
    client: httpx.AsyncClient,
    *,
    name: str = "Alice",
    email: str = "alice@kart.io",
    password: str = "correct-horse",
) -> dict:
    r = await client.post(
        "/api/auth/registration",
        json={"name": name, "email": email, "password": password},
    )
    assert r.status_code == 201, r.text
    # Tests pass credentials explicitly; keep the client's jar clean.
    client.cookies.clear()
    return r.json()
