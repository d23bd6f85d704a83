"""
kart_api.auth.tokens

Session token issuing and verification helpers (the token codec).

Responsibilities:
- Issue signed, time-bounded session tokens for users (7 days) and
  administrators (1 day).
- Verify tokens into a closed set of outcomes instead of raising, so the guard
  can map each outcome to a typed rejection.

Note:
- Tokens are stateless HS256 JWTs. There is no server-side revocation list;
  logging out only clears the client-held credential.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from kart_api.errors import ConfigurationError, ValidationError

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ExpiryPolicy(enum.Enum):
    # The token kind is not encoded in the token; only the lifetime differs.
    user = timedelta(days=7)
    admin = timedelta(days=1)

    @property
    def ttl(self) -> timedelta:
        return self.value


@dataclass(frozen=True, slots=True)
class TokenConfig:
    secret: str | None
    alg: str = "HS256"


# --- Verification outcomes ---------------------------------------------------


@dataclass(frozen=True, slots=True)
class Valid:
    subject: str
    issued_at: datetime
    expires_at: datetime
    claims: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Expired:
    expires_at: datetime | None = None


class MalformedReason(enum.StrEnum):
    # Bad signature or undecodable token.
    invalid_token = "invalid_token"
    # Signature is fine but the payload does not carry a usable subject/timestamps.
    invalid_structure = "invalid_token_structure"


@dataclass(frozen=True, slots=True)
class Malformed:
    reason: MalformedReason
    details: str = ""


@dataclass(frozen=True, slots=True)
class ServerMisconfigured:
    details: str = "JWT signing secret is not configured"


VerifyOutcome = Valid | Expired | Malformed | ServerMisconfigured


class TokenCodec:
    def __init__(self, cfg: TokenConfig, *, clock: Clock = _utcnow) -> None:
        self._cfg = cfg
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._cfg.secret)

    def issue(
        self,
        subject: str,
        policy: ExpiryPolicy = ExpiryPolicy.user,
        *,
        extra_claims: dict[str, Any] | None = None,
    ) -> str:
        if not self._cfg.secret:
            raise ConfigurationError("JWT signing secret is not configured")
        if not subject:
            raise ValidationError("subject is required for token issuance")

        now = self._clock()
        # Registered claims win over extras; downstream code only trusts these.
        payload: dict[str, Any] = dict(extra_claims or {})
        payload.update(
            {
                "sub": subject,
                "iat": int(now.timestamp()),
                "exp": int((now + policy.ttl).timestamp()),
            }
        )
        return jwt.encode(payload, self._cfg.secret, algorithm=self._cfg.alg)

    def verify(self, token: str) -> VerifyOutcome:
        if not self._cfg.secret:
            return ServerMisconfigured()

        try:
            # Timestamps are checked against the injected clock below, not by PyJWT.
            payload = jwt.decode(
                token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_sub": False,
                    "require": ["exp", "iat"],
                },
            )
        except jwt.MissingRequiredClaimError as e:
            return Malformed(MalformedReason.invalid_structure, str(e))
        except InvalidTokenError as e:
            return Malformed(MalformedReason.invalid_token, str(e))

        subject = payload.get("sub")
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not isinstance(subject, str) or not subject:
            return Malformed(MalformedReason.invalid_structure, "token subject missing")
        if not _is_timestamp(exp) or not _is_timestamp(iat):
            return Malformed(MalformedReason.invalid_structure, "token timestamps invalid")

        expires_at = datetime.fromtimestamp(exp, tz=UTC)
        if self._clock() >= expires_at:
            return Expired(expires_at=expires_at)

        return Valid(
            subject=subject,
            issued_at=datetime.fromtimestamp(iat, tz=UTC),
            expires_at=expires_at,
            claims=payload,
        )


def _is_timestamp(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `services/account_service.py` (user + admin login);
# verification is used by `auth/guard.py`.
