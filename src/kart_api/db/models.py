"""
kart_api.db.models

Persistence schema.

Responsibilities:
- User: account record owned by the external user store.
- Cart: one versioned cart document per principal.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from kart_api.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps, matching what SQLite round-trips.
    return datetime.utcnow()


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    # Null for accounts created through social login.
    password_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Cart(Base):
    __tablename__ = "carts"

    # Principal id (user id). Not a foreign key: the cart store is keyed by
    # principal identity only.
    principal_id: Mapped[str] = mapped_column(String(320), primary_key=True)
    # itemId -> size -> quantity
    items: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # Incremented on every write; used for compare-and-swap updates.
    version: Mapped[int] = mapped_column(nullable=False, default=1)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)
