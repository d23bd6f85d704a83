"""
kart_api.auth.passwords

Credential verifier used when creating and checking account passwords.

Responsibilities:
- Hash new passwords with bcrypt.
- Check a candidate password against a stored hash.
"""

from __future__ import annotations

import bcrypt


class CredentialVerifier:
    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check(self, password: str, hashed: str | None) -> bool:
        if not hashed:
            # Accounts created through social login have no password.
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False


# --- Module Notes -----------------------------------------------------------
# bcrypt rejects secrets longer than 72 bytes; registration enforces that bound
# (`services/account_service.py`).
