"""
kart_api.auth.guard

Session guard: credential extraction + token verification -> decision.

Responsibilities:
- Turn the request's credential sources into either an authenticated
  `Principal` or a typed rejection.
- Provide the separate admin verification context (subject must match the
  configured admin email).

Each request starts Unresolved and ends Authenticated or Rejected. The guard
holds no per-request state and does no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from kart_api.auth.extractor import Channel, CredentialSources, resolve
from kart_api.auth.models import Principal
from kart_api.auth.tokens import (
    Expired,
    Malformed,
    ServerMisconfigured,
    TokenCodec,
    Valid,
)
from kart_api.errors import AuthError, AuthReason


@dataclass(frozen=True, slots=True)
class Authenticated:
    principal: Principal
    channel: Channel


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: AuthReason
    error_code: str
    message: str
    details: str | None = None

    def to_error(self) -> AuthError:
        return AuthError(
            reason=self.reason,
            error_code=self.error_code,
            message=self.message,
            details=self.details,
        )


Decision = Authenticated | Rejected

_MISSING = Rejected(
    reason=AuthReason.missing_credential,
    error_code="no_token_found",
    message="Authentication required",
)


class SessionGuard:
    def __init__(self, codec: TokenCodec, *, admin_email: str | None = None) -> None:
        self._codec = codec
        self._admin_email = admin_email

    def authenticate(self, sources: CredentialSources) -> Decision:
        decision = self._resolve(sources)
        if (
            isinstance(decision, Authenticated)
            and self._admin_email
            and decision.principal.subject == self._admin_email
        ):
            # Admin tokens only pass the admin context.
            return Rejected(
                reason=AuthReason.invalid_credential,
                error_code="invalid_token_structure",
                message="Invalid authentication token",
                details="admin token presented to a user endpoint",
            )
        return decision

    def _resolve(self, sources: CredentialSources) -> Decision:
        credential = resolve(sources)
        if credential is None:
            return _MISSING

        outcome = self._codec.verify(credential.token)
        match outcome:
            case Valid(subject=subject, claims=claims):
                # Only surfaced if a token carries it; user tokens never do.
                is_admin = claims.get("is_admin") is True
                return Authenticated(
                    Principal(subject=subject, is_admin=is_admin), credential.channel
                )
            case Expired():
                return Rejected(
                    reason=AuthReason.credential_expired,
                    error_code="token_expired",
                    message="Session expired, please log in again",
                )
            case Malformed(reason=reason, details=details):
                return Rejected(
                    reason=AuthReason.invalid_credential,
                    error_code=reason.value,
                    message="Invalid authentication token",
                    details=details or None,
                )
            case ServerMisconfigured(details=details):
                return Rejected(
                    reason=AuthReason.system_error,
                    error_code="server_config_error",
                    message="Server configuration error",
                    details=details,
                )
        raise AssertionError(f"unhandled verify outcome: {outcome!r}")

    def authenticate_admin(self, sources: CredentialSources) -> Decision:
        decision = self._resolve(sources)
        if isinstance(decision, Rejected):
            return decision
        if not self._admin_email:
            return Rejected(
                reason=AuthReason.system_error,
                error_code="server_config_error",
                message="Server configuration error",
                details="admin email is not configured",
            )
        if decision.principal.subject != self._admin_email:
            return Rejected(
                reason=AuthReason.invalid_credential,
                error_code="invalid_token",
                message="Not authorized, login again",
            )
        return Authenticated(
            Principal(subject=decision.principal.subject, is_admin=True),
            decision.channel,
        )


# --- Module Notes -----------------------------------------------------------
# FastAPI wiring (request -> sources -> decision -> exception) lives in
# `auth/deps.py`; this module stays framework-free.
