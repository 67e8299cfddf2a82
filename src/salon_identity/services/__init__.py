"""
salon_identity.services

Composition layer.

Responsibilities:
- Wire settings, store, HTTP client, resolver, matcher and notification service together.
"""

# Package marker.
