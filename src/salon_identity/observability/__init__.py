"""
salon_identity.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Helpers that keep credentials out of log lines.
"""

# Package marker.
