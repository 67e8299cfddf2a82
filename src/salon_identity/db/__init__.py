"""
salon_identity.db

Persistence package for the device-local credential store.

Responsibilities:
- Declarative base, ORM model and async engine/session helpers.
"""

# Package marker.
