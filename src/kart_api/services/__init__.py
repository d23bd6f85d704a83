"""
kart_api.services

Service layer.

Responsibilities:
- Cart state aggregation (pure transitions + versioned writes).
- Account flows (registration, login, admin login) and token issuance.
"""

# Package marker.
