"""
salon_identity.auth

Signed bearer token helpers.

Responsibilities:
- Mint and validate HS256 tokens for the stub backend.
- Peek at claims of tokens the client holds but cannot verify.
"""

# Package marker.
