"""
salon_identity

Session-credential resolution and face-roster identification for the salon
admin/manager app.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; importing the package must not open stores or HTTP clients.
