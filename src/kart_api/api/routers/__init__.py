"""
kart_api.api.routers

HTTP routers (health, auth, user, cart).
"""

# Package marker.
