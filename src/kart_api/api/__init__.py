"""
kart_api.api

API package for the Kart backend.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, error rendering and session cookies.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request validation + auth + delegation to services.
