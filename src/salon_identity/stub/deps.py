"""
salon_identity.stub.deps

FastAPI dependencies for the stub backend.

Responsibilities:
- Expose settings and the directory stored on app.state.
- Reject requests without a valid signed bearer token, with the same error
  texts the real backend uses.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from salon_identity.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from salon_identity.credentials.tokens import PSEUDO_PREFIX
from salon_identity.settings import Settings
from salon_identity.stub.directory import StubDirectory

_bearer = HTTPBearer(auto_error=False)


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def directory_dep(request: Request) -> StubDirectory:
    return request.app.state.directory  # type: ignore[attr-defined]


def require_bearer(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    token = creds.credentials
    if token.startswith(PSEUDO_PREFIX):
        # The backend never accepts pseudo-tokens; clients must exchange them first.
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED, detail="Invalid face authentication token"
        )

    try:
        return decode_and_validate(cfg=JwtConfig.from_settings(settings), token=token)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Unauthorized: {e}") from e
