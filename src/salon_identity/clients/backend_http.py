"""
salon_identity.clients.backend_http

HTTP client boundary for the salon backend.

Responsibilities:
- Build the shared `httpx.AsyncClient` (base URL + default CRUD deadline).
- Fetch the face roster and call the compare-faces service.
- Wrap notification routes in `{success, error?}` envelopes, the shape the
  unauthorized-retry wrapper classifies.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx

from salon_identity.credentials.models import Scope
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.credentials.retry import Response, call_with_retry
from salon_identity.settings import Settings

Probe = str | Path | bytes


def create_http_client(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.crud_timeout_s,
        transport=transport,
    )


def _bearer(token: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _read_probe(probe: Probe) -> bytes:
    if isinstance(probe, bytes):
        return probe
    path = str(probe)
    # Camera paths come back as file:// URIs on device.
    if path.startswith("file://"):
        path = path[len("file://") :]
    return Path(path).read_bytes()


class BackendClient:
    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    async def fetch_roster(self, token: str) -> list[dict[str, Any]]:
        r = await self._http.get("/employees/all", headers=_bearer(token))
        r.raise_for_status()
        body = r.json()

        if isinstance(body, list):
            return body
        if isinstance(body, dict):
            if isinstance(body.get("data"), list):
                return body["data"]
            grouped = body.get("grouped")
            if isinstance(grouped, dict):
                return [
                    *grouped.get("admins", []),
                    *grouped.get("managers", []),
                    *grouped.get("employees", []),
                ]
        return []

    async def compare_faces(
        self, token: str | None, probe: Probe, reference_url: str
    ) -> dict[str, Any]:
        r = await self._http.post(
            "/employees/compare-faces",
            headers=_bearer(token),
            files={"sourceImage": ("captured_face.jpg", _read_probe(probe), "image/jpeg")},
            data={"targetImageUrl": reference_url},
            timeout=self._settings.compare_timeout_s,
        )
        r.raise_for_status()
        return r.json()

    # Notifications: failures are returned, not raised.

    async def get_notifications(self, token: str, **params: Any) -> dict[str, Any]:
        query = {k: v for k, v in params.items() if v is not None and v != ""}
        body, err = await self._call("GET", "/notifications", token, params=query)
        if err is not None:
            return err
        data = body.get("data")
        items = data.get("notifications") if body.get("success") and isinstance(data, dict) else None
        if not isinstance(items, list):
            return {
                "success": False,
                "error": body.get("message") or "Failed to fetch notifications.",
            }
        return {
            "success": True,
            "data": {
                "notifications": [_map_notification(n) for n in items],
                "unreadCount": _unread_count(body),
            },
            "message": body.get("message") or "Notifications fetched successfully.",
        }

    async def get_notification_count(self, token: str) -> dict[str, Any]:
        body, err = await self._call("GET", "/notifications/count", token)
        if err is not None:
            return {**err, "unreadCount": 0}
        return {"success": True, "unreadCount": _unread_count(body)}

    async def mark_notification_read(self, token: str, notification_id: str) -> dict[str, Any]:
        body, err = await self._call("PUT", f"/notifications/{notification_id}/read", token)
        return err if err is not None else {"success": True, **body}

    async def mark_all_read(self, token: str) -> dict[str, Any]:
        body, err = await self._call("PUT", "/notifications/mark-all-read", token)
        return err if err is not None else {"success": True, **body}

    async def delete_notification(self, token: str, notification_id: str) -> dict[str, Any]:
        body, err = await self._call("DELETE", f"/notifications/{notification_id}", token)
        return err if err is not None else {"success": True, **body}

    async def _call(
        self,
        method: str,
        path: str,
        token: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> tuple[dict[str, Any], dict[str, Any] | None]:
        try:
            r = await self._http.request(method, path, headers=_bearer(token), params=params)
        except httpx.HTTPError as e:
            return {}, {"success": False, "error": f"Network error: {e}"}

        try:
            body = r.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if r.is_error:
            # Keep the status visible: the retry wrapper matches on "401".
            message = body.get("message") or body.get("error")
            error = f"HTTP {r.status_code}: {message}" if message else f"HTTP {r.status_code}"
            return body, {"success": False, "error": error, "code": body.get("code")}
        return body, None


def _unread_count(body: dict[str, Any]) -> int:
    data = body.get("data") if isinstance(body.get("data"), dict) else {}
    pagination = data.get("pagination") if isinstance(data.get("pagination"), dict) else {}
    for value in (
        pagination.get("unreadCount"),
        data.get("unreadCount"),
        data.get("count"),
        body.get("unreadCount"),
    ):
        if isinstance(value, int):
            return value
    return 0


def _map_notification(item: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": item.get("_id") or item.get("id"),
        "title": item.get("title") or "No Title",
        "message": item.get("message") or "No message",
        "type": item.get("type") or "info",
        "timestamp": item.get("createdAt"),
        "read": bool(item.get("isRead", False)),
    }


class NotificationService:
    """
    Notification calls routed through the unauthorized-retry wrapper, the way
    every protected screen calls the backend.
    """

    def __init__(
        self,
        *,
        resolver: TokenResolver,
        client: BackendClient,
        scope: Scope = Scope.any,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self._scope = scope

    async def list(self, *, page: int = 1, limit: int = 20, **filters: Any) -> Response:
        return await call_with_retry(
            self._resolver,
            lambda t: self._client.get_notifications(t, page=page, limit=limit, **filters),
            scope=self._scope,
        )

    async def unread_count(self) -> int:
        response = await call_with_retry(
            self._resolver, self._client.get_notification_count, scope=self._scope
        )
        count = response.get("unreadCount", 0)
        return count if isinstance(count, int) else 0

    async def mark_read(self, notification_id: str) -> Response:
        return await call_with_retry(
            self._resolver,
            lambda t: self._client.mark_notification_read(t, notification_id),
            scope=self._scope,
        )

    async def mark_all_read(self) -> Response:
        return await call_with_retry(
            self._resolver, self._client.mark_all_read, scope=self._scope
        )

    async def delete(self, notification_id: str) -> Response:
        return await call_with_retry(
            self._resolver,
            lambda t: self._client.delete_notification(t, notification_id),
            scope=self._scope,
        )


# --- Module Notes -----------------------------------------------------------
# Employee/client/service/product CRUD routes stay outside this package; only the
# calls the identity flows need are wrapped here.
