"""
kart_api.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.

    For users `subject` is the user id; for administrators it is the admin email.
    """

    subject: str
    is_admin: bool = False


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API, services and log context.
