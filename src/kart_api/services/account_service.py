"""
kart_api.services.account_service

Account flows that end in a session token.

Responsibilities:
- Register users and log them in (password or social login).
- Log the configured administrator in with a short-lived admin token.
- Own the transaction for account writes (commit/rollback here, not in routers).
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kart_api.auth.passwords import CredentialVerifier
from kart_api.auth.tokens import ExpiryPolicy, TokenCodec
from kart_api.db.models import User
from kart_api.db.repositories.users import UserRepo
from kart_api.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from kart_api.observability.logging import get_logger
from kart_api.settings import Settings

log = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt rejects secrets longer than 72 bytes.
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True, slots=True)
class Session:
    user: User
    token: str


class AccountService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        codec: TokenCodec,
        settings: Settings,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        self._session = session
        self._codec = codec
        self._settings = settings
        self._verifier = verifier or CredentialVerifier()
        self._users = UserRepo(session)

    async def register(self, *, name: str, email: str, password: str) -> Session:
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        email = _valid_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Enter Strong Password")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError("Password is too long")

        if await self._users.get_by_email(email) is not None:
            raise ConflictError("User already exist")

        try:
            user = await self._users.create(
                name=name, email=email, password_hash=self._verifier.hash(password)
            )
            token = self._codec.issue(user.id, ExpiryPolicy.user)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise ConflictError("User already exist") from e
        except ConfigurationError:
            await self._session.rollback()
            raise

        log.info("user_registered", user_id=user.id)
        return Session(user=user, token=token)

    async def login(self, *, email: str, password: str) -> Session:
        if not email or not password:
            raise ValidationError("Email and password are required")
        email = _normalize_email(email)

        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("User is not Found")
        if not self._verifier.check(password, user.password_hash):
            raise ValidationError("Incorrect password")

        token = self._codec.issue(user.id, ExpiryPolicy.user)
        log.info("user_logged_in", user_id=user.id)
        return Session(user=user, token=token)

    async def social_login(self, *, name: str, email: str) -> Session:
        """Log in a user already verified by an external identity provider."""
        if not name or not email:
            raise ValidationError("Name and email are required")
        email = _valid_email(email)

        user = await self._users.get_by_email(email)
        if user is None:
            try:
                user = await self._users.create(name=name, email=email, password_hash=None)
                await self._session.commit()
                log.info("user_registered", user_id=user.id, via="social")
            except IntegrityError:
                # A concurrent first login created the account; use that one.
                await self._session.rollback()
                user = await self._users.get_by_email(email)
                if user is None:
                    raise
        if user.password_hash is not None:
            # Password accounts must log in with their password.
            log.info("social_login_refused", user_id=user.id)
            raise ConflictError("Account exists, log in with your password")

        token = self._codec.issue(user.id, ExpiryPolicy.user)
        return Session(user=user, token=token)

    def admin_login(self, *, email: str, password: str) -> str:
        admin_email = self._settings.admin_email
        admin_password = self._settings.admin_password
        if not admin_email or not admin_password:
            raise ConfigurationError("admin credentials are not configured")

        email_ok = hmac.compare_digest(email.encode("utf-8"), admin_email.encode("utf-8"))
        password_ok = hmac.compare_digest(
            password.encode("utf-8"), admin_password.encode("utf-8")
        )
        if not (email_ok and password_ok):
            log.info("admin_login_failed")
            raise ValidationError("Invalid credentials")

        log.info("admin_logged_in")
        return self._codec.issue(admin_email, ExpiryPolicy.admin)

    async def current_user(self, user_id: str) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise NotFoundError("User is not found")
        return user


def _valid_email(email: str) -> str:
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError("Enter valid Email") from e


def _normalize_email(email: str) -> str:
    # Lookups must match the normalized form stored at registration.
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email


# --- Module Notes -----------------------------------------------------------
# Logout is stateless: tokens cannot be revoked server-side, so the router only
# clears the session cookie.
