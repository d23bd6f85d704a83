"""
kart_api.db.repositories

Repository layer (data access).
"""

# Package marker.
