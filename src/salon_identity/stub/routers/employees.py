"""
salon_identity.stub.routers.employees

Roster and face comparison routes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile

from salon_identity.stub.deps import directory_dep, require_bearer
from salon_identity.stub.directory import StubDirectory

router = APIRouter(prefix="/employees", tags=["employees"], dependencies=[Depends(require_bearer)])


@router.get("/all")
async def all_employees(directory: StubDirectory = Depends(directory_dep)) -> dict[str, Any]:
    return {"success": True, "data": directory.people}


@router.post("/compare-faces")
async def compare_faces(
    sourceImage: UploadFile = File(...),
    targetImageUrl: str = Form(...),
    directory: StubDirectory = Depends(directory_dep),
) -> dict[str, Any]:
    label = (await sourceImage.read()).decode("utf-8", errors="replace").strip()
    confidence = directory.score(label, targetImageUrl)
    return {"match": confidence >= directory.match_floor, "confidence": confidence}
