"""
tests.test_tokens

Token codec: issuance, verification outcomes and expiry policies.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from kart_api.auth.tokens import (
    Expired,
    ExpiryPolicy,
    Malformed,
    MalformedReason,
    ServerMisconfigured,
    TokenCodec,
    TokenConfig,
    Valid,
)
from kart_api.errors import ConfigurationError, ValidationError

SECRET = "unit-test-secret-with-enough-length"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 10, 12, 0, tzinfo=UTC))


@pytest.fixture
def codec(clock: FakeClock) -> TokenCodec:
    return TokenCodec(TokenConfig(secret=SECRET), clock=clock)


def test_issue_then_verify_returns_subject(codec: TokenCodec, clock: FakeClock) -> None:
    token = codec.issue("user-42")
    outcome = codec.verify(token)

    assert isinstance(outcome, Valid)
    assert outcome.subject == "user-42"
    assert outcome.issued_at == clock.now
    assert outcome.expires_at == clock.now + timedelta(days=7)


def test_admin_policy_expires_after_one_day(codec: TokenCodec, clock: FakeClock) -> None:
    outcome = codec.verify(codec.issue("admin@kart.io", ExpiryPolicy.admin))
    assert isinstance(outcome, Valid)
    assert outcome.expires_at - outcome.issued_at == timedelta(days=1)


@pytest.mark.parametrize("policy", list(ExpiryPolicy))
def test_verification_after_expiry_is_expired(
    codec: TokenCodec, clock: FakeClock, policy: ExpiryPolicy
) -> None:
    token = codec.issue("user-42", policy)

    clock.now += policy.ttl - timedelta(seconds=1)
    assert isinstance(codec.verify(token), Valid)

    clock.now += timedelta(seconds=2)
    outcome = codec.verify(token)
    assert isinstance(outcome, Expired)


def test_wrong_signature_is_malformed(codec: TokenCodec, clock: FakeClock) -> None:
    other = TokenCodec(TokenConfig(secret="another-secret-with-enough-length"), clock=clock)
    outcome = codec.verify(other.issue("user-42"))

    assert isinstance(outcome, Malformed)
    assert outcome.reason is MalformedReason.invalid_token


@pytest.mark.parametrize("token", ["garbage", "a.b.c", ""])
def test_undecodable_token_is_malformed(codec: TokenCodec, token: str) -> None:
    outcome = codec.verify(token)
    assert isinstance(outcome, Malformed)
    assert outcome.reason is MalformedReason.invalid_token


def test_payload_without_subject_is_invalid_structure(
    codec: TokenCodec, clock: FakeClock
) -> None:
    now = int(clock.now.timestamp())
    # Legacy admin tokens carried `email` instead of `sub`.
    token = jwt.encode({"email": "a@kart.io", "iat": now, "exp": now + 60}, SECRET)

    outcome = codec.verify(token)
    assert isinstance(outcome, Malformed)
    assert outcome.reason is MalformedReason.invalid_structure


@pytest.mark.parametrize("subject", [123, ["a"], ""])
def test_non_string_subject_is_invalid_structure(
    codec: TokenCodec, clock: FakeClock, subject: object
) -> None:
    now = int(clock.now.timestamp())
    # Signed at the JWS layer so no claim checks run on the way in.
    claims = json.dumps({"sub": subject, "iat": now, "exp": now + 60}).encode()
    token = jwt.PyJWS().encode(claims, SECRET, algorithm="HS256")

    outcome = codec.verify(token)
    assert isinstance(outcome, Malformed)
    assert outcome.reason is MalformedReason.invalid_structure


def test_payload_without_expiry_is_invalid_structure(codec: TokenCodec) -> None:
    token = jwt.encode({"sub": "user-42"}, SECRET)
    outcome = codec.verify(token)
    assert isinstance(outcome, Malformed)
    assert outcome.reason is MalformedReason.invalid_structure


def test_missing_secret() -> None:
    codec = TokenCodec(TokenConfig(secret=None))

    with pytest.raises(ConfigurationError):
        codec.issue("user-42")
    assert isinstance(codec.verify("anything"), ServerMisconfigured)


def test_empty_subject_is_rejected(codec: TokenCodec) -> None:
    with pytest.raises(ValidationError):
        codec.issue("")


def test_extra_claims_cannot_override_registered_claims(codec: TokenCodec) -> None:
    token = codec.issue("user-42", extra_claims={"sub": "someone-else", "scope": "cart"})
    outcome = codec.verify(token)

    assert isinstance(outcome, Valid)
    assert outcome.subject == "user-42"
    assert outcome.claims["scope"] == "cart"
