"""
salon_identity.stub.routers.notifications

Notification routes; the protected collaborator the retry wrapper is exercised against.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_404_NOT_FOUND

from salon_identity.stub.deps import directory_dep, require_bearer
from salon_identity.stub.directory import StubDirectory

router = APIRouter(
    prefix="/notifications", tags=["notifications"], dependencies=[Depends(require_bearer)]
)


def _unread(directory: StubDirectory) -> int:
    return sum(1 for n in directory.notifications if not n.get("isRead"))


@router.get("")
async def list_notifications(
    page: int = 1,
    limit: int = 20,
    directory: StubDirectory = Depends(directory_dep),
) -> dict[str, Any]:
    start = (max(page, 1) - 1) * limit
    items = directory.notifications[start : start + limit]
    return {
        "success": True,
        "data": {
            "notifications": items,
            "pagination": {"page": page, "limit": limit, "unreadCount": _unread(directory)},
        },
    }


@router.get("/count")
async def notification_count(directory: StubDirectory = Depends(directory_dep)) -> dict[str, Any]:
    return {"success": True, "unreadCount": _unread(directory)}


@router.put("/mark-all-read")
async def mark_all_read(directory: StubDirectory = Depends(directory_dep)) -> dict[str, Any]:
    for n in directory.notifications:
        n["isRead"] = True
    return {"success": True, "message": "All notifications marked as read"}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str, directory: StubDirectory = Depends(directory_dep)
) -> dict[str, Any]:
    for n in directory.notifications:
        if n.get("_id") == notification_id:
            n["isRead"] = True
            return {"success": True, "message": "Notification marked as read"}
    raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Notification not found")


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str, directory: StubDirectory = Depends(directory_dep)
) -> dict[str, Any]:
    before = len(directory.notifications)
    directory.notifications[:] = [
        n for n in directory.notifications if n.get("_id") != notification_id
    ]
    if len(directory.notifications) == before:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"success": True, "message": "Notification deleted"}
