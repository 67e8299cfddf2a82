"""
salon_identity.credentials

Credential store, token resolution and the unauthorized-retry wrapper.

Responsibilities:
- Decode stored tokens into explicit shapes (signed / pseudo / opaque).
- Resolve one usable bearer token per role scope, exchanging pseudo-tokens.
- Retry a protected call once after the server rejects its token.
"""

from salon_identity.credentials.models import CredentialEnvelope, Role, Scope, SubjectProfile
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.credentials.retry import call_with_retry, is_auth_error

__all__ = [
    "CredentialEnvelope",
    "Role",
    "Scope",
    "SubjectProfile",
    "TokenResolver",
    "call_with_retry",
    "is_auth_error",
]
