"""
salon_identity.clients

Backend client package.

Responsibilities:
- HTTP boundary for the roster, face comparison and notification routes.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Credential logic depends on these clients, never on raw httpx calls.
