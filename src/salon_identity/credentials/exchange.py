"""
salon_identity.credentials.exchange

Face-login exchanger: trades a face-verified identity for a signed bearer token.

Responsibilities:
- POST to the role-specific face-login endpoint.
- Extract the token from either `token` or `data.token`.
- Turn every failure (HTTP, transport, timeout, malformed body) into `ExchangeFailed`.
"""

from __future__ import annotations

from typing import Any

import httpx

from salon_identity.credentials.models import Role
from salon_identity.errors import ExchangeFailed
from salon_identity.observability.logging import get_logger, token_preview
from salon_identity.settings import Settings

log = get_logger(__name__)

FACE_LOGIN_PATHS: dict[Role, str] = {
    Role.admin: "/auth/face-login",
    Role.manager: "/manager/face-login",
}


def extract_token(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    token = body.get("token")
    if not token and isinstance(body.get("data"), dict):
        token = body["data"].get("token")
    return token if isinstance(token, str) and token else None


class FaceLoginExchanger:
    """
    The one remote call both the resolver and the manual pseudo-token flow use.
    The endpoint is idempotent per identity, so callers may repeat it freely.
    """

    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    async def exchange(self, role: Role, identity_id: str, name: str | None) -> str:
        path = FACE_LOGIN_PATHS[role]
        # The backend names the id field per role: adminId / managerId.
        body = {f"{role.value}Id": identity_id, "name": name, "faceVerified": True}

        try:
            r = await self._http.post(path, json=body, timeout=self._settings.exchange_timeout_s)
        except httpx.TimeoutException as e:
            raise ExchangeFailed(role.value, "timed out") from e
        except httpx.HTTPError as e:
            raise ExchangeFailed(role.value, f"transport error: {e}") from e

        log.info("face_login_response", role=role.value, status=r.status_code)
        if r.is_error:
            raise ExchangeFailed(role.value, _error_message(r), status_code=r.status_code)

        try:
            payload = r.json()
        except ValueError as e:
            raise ExchangeFailed(role.value, "response is not JSON", status_code=r.status_code) from e

        token = extract_token(payload)
        if token is None:
            raise ExchangeFailed(role.value, "response carries no token", status_code=r.status_code)

        log.info("token_exchanged", role=role.value, token=token_preview(token))
        return token


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return f"HTTP {r.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {r.status_code}"


# --- Module Notes -----------------------------------------------------------
# The shared httpx client carries `base_url`; paths here are relative to it.
