"""
salon_identity.stub

Development backend that emulates the salon API contract.

Responsibilities:
- Serve face-login, roster, compare-faces and notification routes locally.
- Give integration tests a real HTTP surface (via `httpx.ASGITransport`).
"""

# Package marker.
