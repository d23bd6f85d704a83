"""
kart_api.api.cookies

Session cookie helpers.

Responsibilities:
- Set the `token` cookie with the lifetime of the issued token (7 days for
  users, 1 day for admins) and path `/`.
- Clear it on logout with matching attributes so browsers drop it.
"""

from __future__ import annotations

from starlette.responses import Response

from kart_api.auth.extractor import TOKEN_FIELD
from kart_api.auth.tokens import ExpiryPolicy
from kart_api.settings import Settings


def _attrs(settings: Settings) -> dict[str, object]:
    return {
        "path": "/",
        "httponly": settings.cookie_httponly,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
    }


def set_session_cookie(
    response: Response,
    token: str,
    *,
    settings: Settings,
    policy: ExpiryPolicy = ExpiryPolicy.user,
) -> None:
    response.set_cookie(
        TOKEN_FIELD,
        token,
        max_age=int(policy.ttl.total_seconds()),
        **_attrs(settings),  # type: ignore[arg-type]
    )


def clear_session_cookie(response: Response, *, settings: Settings) -> None:
    response.delete_cookie(TOKEN_FIELD, **_attrs(settings))  # type: ignore[arg-type]
