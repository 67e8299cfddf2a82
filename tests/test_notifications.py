"""
tests.test_notifications

Backend client envelopes for notification routes, and user-facing error texts.
"""

from __future__ import annotations

import httpx
import pytest

from salon_identity.clients.backend_http import BackendClient, create_http_client
from salon_identity.credentials.retry import is_auth_error
from salon_identity.errors import ExchangeFailed, NoCandidates, NoCredential, describe_error


def _client(settings, handler) -> BackendClient:
    return BackendClient(
        settings=settings,
        http=create_http_client(settings, transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_list_maps_backend_records(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer eyJx"
        assert request.url.params["page"] == "2"
        assert "type" not in request.url.params
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "notifications": [{"_id": "n9", "isRead": True}],
                    "pagination": {"unreadCount": 4},
                },
            },
        )

    r = await _client(settings, handler).get_notifications("eyJx", page=2, type="")

    assert r["success"] is True
    assert r["data"]["unreadCount"] == 4
    assert r["data"]["notifications"] == [
        {
            "id": "n9",
            "title": "No Title",
            "message": "No message",
            "type": "info",
            "timestamp": None,
            "read": True,
        }
    ]


@pytest.mark.asyncio
async def test_http_errors_keep_the_status_visible(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"success": False, "message": "Token expired"})

    r = await _client(settings, handler).mark_all_read("eyJx")

    assert r["success"] is False
    assert r["error"] == "HTTP 401: Token expired"
    assert is_auth_error(r)


@pytest.mark.asyncio
async def test_server_errors_are_not_auth_errors(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    r = await _client(settings, handler).get_notification_count("eyJx")

    assert r == {"success": False, "error": "HTTP 500", "code": None, "unreadCount": 0}
    assert not is_auth_error(r)


@pytest.mark.asyncio
async def test_network_errors_are_returned(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    r = await _client(settings, handler).delete_notification("eyJx", "n1")

    assert r["success"] is False
    assert r["error"].startswith("Network error")


def test_error_messages_are_actionable() -> None:
    assert "login again" in describe_error(NoCredential("any"))
    assert "login again" in describe_error(ExchangeFailed("manager", "timed out"))
    assert "register" in describe_error(NoCandidates())
    assert describe_error(KeyError("x")) == "Something went wrong. Please try again."
