"""
salon_identity.auth.jwt

JWT issuing, validation and inspection helpers.

Responsibilities:
- Issue tokens the way the backend's face-login endpoints do (used by the stub).
- Decode and validate tokens with strict claim requirements.
- Read claims without a key, for client-side diagnostics only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from salon_identity.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    roles: list[str],
    name: str | None = None,
    ttl: timedelta = timedelta(hours=12),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "roles": roles,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if name:
        payload["name"] = name
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def peek_claims(token: str) -> dict[str, Any]:
    """
    Return the unverified payload of `token`, or `{}` if it is not a JWT.

    The client never holds the signing key; whatever this returns is a hint,
    not a trust decision.
    """

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except InvalidTokenError:
        return {}
    return claims if isinstance(claims, dict) else {}


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by the stub backend (`salon_identity.stub`); the client
# side only ever calls `peek_claims`.
