"""
kart_api.auth

Authentication package.

Responsibilities:
- Session token issuing and verification (JWT).
- Multi-channel credential extraction and the request guard built on it.
- FastAPI auth dependencies (Principal for users and administrators).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Everything except `deps` is framework-free and can be exercised without an app.
