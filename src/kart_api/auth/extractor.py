"""
kart_api.auth.extractor

Credential extraction across request channels.

Responsibilities:
- Pick the session token from the first usable channel in a fixed priority:
  cookie, Authorization bearer header, JSON body field, X-Auth-Token header,
  query parameter.
- Adapt a Starlette request into the plain `CredentialSources` value the
  extractor works on.

Browsers that block third-party cookies in cross-origin deployments still
authenticate through the header/body/query fallbacks. The cookie is preferred;
the query parameter (visible in logs and URLs) comes last.
"""

from __future__ import annotations

import enum
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from starlette.requests import Request

TOKEN_FIELD = "token"
CUSTOM_HEADER = "x-auth-token"
BEARER_SCHEME = "bearer"

# Some clients serialize an unset value as this literal string.
UNDEFINED_SENTINEL = "undefined"


class Channel(enum.StrEnum):
    cookie = "cookie"
    authorization = "authorization"
    body = "body"
    custom_header = "custom_header"
    query = "query"


@dataclass(frozen=True, slots=True)
class CredentialSources:
    cookie: str | None = None
    authorization: str | None = None
    body: str | None = None
    custom_header: str | None = None
    query: str | None = None


@dataclass(frozen=True, slots=True)
class Credential:
    token: str
    channel: Channel


def _usable(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value or value == UNDEFINED_SENTINEL:
        return None
    return value


def _bearer(header: str | None) -> str | None:
    if not header:
        return None
    scheme, _, rest = header.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    return _usable(rest)


_Extractor = Callable[[CredentialSources], str | None]

CHANNELS: tuple[tuple[Channel, _Extractor], ...] = (
    (Channel.cookie, lambda s: _usable(s.cookie)),
    (Channel.authorization, lambda s: _bearer(s.authorization)),
    (Channel.body, lambda s: _usable(s.body)),
    (Channel.custom_header, lambda s: _usable(s.custom_header)),
    (Channel.query, lambda s: _usable(s.query)),
)


def resolve(sources: CredentialSources) -> Credential | None:
    """Return the first usable credential and the channel that carried it."""
    for channel, extractor in CHANNELS:
        token = extractor(sources)
        if token is not None:
            return Credential(token=token, channel=channel)
    return None


def extract(sources: CredentialSources) -> str | None:
    credential = resolve(sources)
    return credential.token if credential is not None else None


async def sources_from_request(request: Request) -> CredentialSources:
    return CredentialSources(
        cookie=request.cookies.get(TOKEN_FIELD),
        authorization=request.headers.get("authorization"),
        body=await _body_token(request),
        custom_header=request.headers.get(CUSTOM_HEADER),
        query=request.query_params.get(TOKEN_FIELD),
    )


async def _body_token(request: Request) -> str | None:
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    # Starlette caches the body, so route handlers can still parse it afterwards.
    raw = await request.body()
    if not raw:
        return None
    try:
        data: Any = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    value = data.get(TOKEN_FIELD)
    return value if isinstance(value, str) else None


# --- Module Notes -----------------------------------------------------------
# `resolve` is pure; only `sources_from_request` touches the request object, and
# it never mutates it.
