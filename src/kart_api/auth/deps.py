"""
kart_api.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Build credential sources from the request and run the session guard.
- Convert rejections into `AuthError` before any handler runs.
- Attach the resolved `Principal` to `request.state` and the log context.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request

from kart_api.auth.extractor import sources_from_request
from kart_api.auth.guard import Authenticated, Decision, SessionGuard
from kart_api.auth.models import Principal
from kart_api.observability.logging import get_logger

log = get_logger(__name__)


def guard_from_app(request: Request) -> SessionGuard:
    # The guard is created once on app startup in `kart_api.api.app.create_app`.
    return request.app.state.guard  # type: ignore[attr-defined]


def _admit(request: Request, decision: Decision) -> Principal:
    if not isinstance(decision, Authenticated):
        log.info(
            "auth_rejected",
            reason=decision.reason.value,
            error=decision.error_code,
        )
        raise decision.to_error()

    principal = decision.principal
    request.state.principal = principal
    structlog.contextvars.bind_contextvars(principal=principal.subject)
    log.debug("auth_ok", channel=decision.channel.value, admin=principal.is_admin)
    return principal


async def get_principal(
    request: Request,
    guard: SessionGuard = Depends(guard_from_app),
) -> Principal:
    sources = await sources_from_request(request)
    return _admit(request, guard.authenticate(sources))


async def get_admin(
    request: Request,
    guard: SessionGuard = Depends(guard_from_app),
) -> Principal:
    sources = await sources_from_request(request)
    return _admit(request, guard.authenticate_admin(sources))


# --- Module Notes -----------------------------------------------------------
# Tokens are never logged; only the channel and the rejection code are.
