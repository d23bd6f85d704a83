"""
kart_api.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probes (`/healthz`, `/api/health`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from kart_api.api.deps import db_session, settings_from_app
from kart_api.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}


@router.get("/api/health")
async def api_health(settings: Settings = Depends(settings_from_app)) -> dict[str, str]:
    # Kept for storefront clients that poll this path.
    return {
        "status": "ok",
        "environment": settings.env,
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }
