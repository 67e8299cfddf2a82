"""
salon_identity.stub.routers.face_login

Face-login exchange routes.

Responsibilities:
- Mint signed tokens for face-verified admins and managers.
- Answer in both token layouts clients must accept (`token` and `data.token`).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from salon_identity.auth.jwt import JwtConfig, issue_token
from salon_identity.settings import Settings
from salon_identity.stub.deps import directory_dep, settings_dep
from salon_identity.stub.directory import StubDirectory

router = APIRouter(tags=["face-login"])


class FaceLoginRequest(BaseModel):
    adminId: str | None = None
    managerId: str | None = None
    name: str | None = None
    faceVerified: bool = False


def _mint(settings: Settings, role: str, person: dict[str, Any]) -> str:
    return issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=str(person["_id"]),
        roles=[role],
        name=person.get("name"),
    )


def _lookup(directory: StubDirectory, role: str, identity_id: str | None, face_verified: bool):
    if not face_verified:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Face verification required")
    person = directory.find(role, identity_id or "")
    if person is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=f"{role.title()} not found")
    return person


@router.post("/auth/face-login")
async def admin_face_login(
    body: FaceLoginRequest,
    settings: Settings = Depends(settings_dep),
    directory: StubDirectory = Depends(directory_dep),
) -> dict[str, Any]:
    person = _lookup(directory, "admin", body.adminId, body.faceVerified)
    return {"success": True, "data": {"token": _mint(settings, "admin", person), "admin": person}}


@router.post("/manager/face-login")
async def manager_face_login(
    body: FaceLoginRequest,
    settings: Settings = Depends(settings_dep),
    directory: StubDirectory = Depends(directory_dep),
) -> dict[str, Any]:
    person = _lookup(directory, "manager", body.managerId, body.faceVerified)
    return {"success": True, "token": _mint(settings, "manager", person), "manager": person}
