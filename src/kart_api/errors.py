"""
kart_api.errors

Error taxonomy shared by the auth, cart and account layers.

Responsibilities:
- Give every failure a type and an HTTP status so the API layer can render it
  without inspecting messages.
- Keep auth rejections typed (reason + wire error code) end to end.
"""

from __future__ import annotations

import enum


class KartError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(KartError):
    # Operator error (e.g. missing signing secret); not retried.
    status_code = 500


class ValidationError(KartError):
    status_code = 400


class NotFoundError(KartError):
    status_code = 404


class ConflictError(KartError):
    status_code = 409


class StorageError(KartError):
    # Opaque pass-through from the persistence layer.
    status_code = 500


class AuthReason(enum.StrEnum):
    missing_credential = "MissingCredential"
    invalid_credential = "InvalidCredential"
    credential_expired = "CredentialExpired"
    system_error = "SystemError"


class AuthError(KartError):
    def __init__(
        self,
        *,
        reason: AuthReason,
        error_code: str,
        message: str,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.error_code = error_code
        self.details = details
        # SystemError is operator misconfiguration, not a caller mistake.
        self.status_code = 500 if reason is AuthReason.system_error else 401


# --- Module Notes -----------------------------------------------------------
# Rendering lives in `kart_api.api.errors`; nothing here imports FastAPI.
