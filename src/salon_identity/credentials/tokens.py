"""
salon_identity.credentials.tokens

Token shapes held in the credential store.

Responsibilities:
- Decode a raw stored string once into `SignedToken | PseudoToken | OpaqueToken`.
- Mint pseudo-tokens for the on-device face capture hand-off.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, TypeAlias

from salon_identity.auth.jwt import peek_claims

SIGNED_PREFIX = "eyJ"
PSEUDO_PREFIX = "face_auth_"
_SEP = "_"


@dataclass(frozen=True, slots=True)
class SignedToken:
    """A backend-issued JWT. Shape only; the server decides validity."""

    raw: str

    def claims(self) -> dict[str, Any]:
        return peek_claims(self.raw)

    def expired(self, now: datetime | None = None) -> bool:
        exp = self.claims().get("exp")
        if not isinstance(exp, int | float):
            return False
        now = now or datetime.now(tz=UTC)
        return now.timestamp() >= float(exp)


@dataclass(frozen=True, slots=True)
class PseudoToken:
    """
    Placeholder written right after a face capture:
    `face_auth_<issued-at millis>_<subject id>`.
    """

    subject_id: str
    issued_at: int
    raw: str


@dataclass(frozen=True, slots=True)
class OpaqueToken:
    """Anything else. Returned as a last resort; the server will judge it."""

    raw: str


Token: TypeAlias = SignedToken | PseudoToken | OpaqueToken


def decode_token(raw: str | None) -> Token | None:
    if not raw:
        return None
    if raw.startswith(SIGNED_PREFIX):
        return SignedToken(raw)
    if raw.startswith(PSEUDO_PREFIX):
        pseudo = _parse_pseudo(raw)
        return pseudo if pseudo is not None else OpaqueToken(raw)
    return OpaqueToken(raw)


def _parse_pseudo(raw: str) -> PseudoToken | None:
    # Subject ids may contain the separator, so only split off the timestamp.
    issued, sep, subject_id = raw[len(PSEUDO_PREFIX) :].partition(_SEP)
    if not sep or not subject_id or not issued.isdigit():
        return None
    return PseudoToken(subject_id=subject_id, issued_at=int(issued), raw=raw)


def mint_pseudo_token(subject_id: str, issued_at: int | None = None) -> str:
    if not subject_id:
        raise ValueError("subject_id is required")
    if issued_at is None:
        issued_at = int(time.time() * 1000)
    return f"{PSEUDO_PREFIX}{issued_at}{_SEP}{subject_id}"


# --- Module Notes -----------------------------------------------------------
# Prefix sniffing lives here and nowhere else; the rest of the package matches
# on the decoded types.
