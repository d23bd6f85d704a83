"""
kart_api.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories (user store,
  versioned cart store).
"""

# Package marker.
