"""
tests.test_store

Credential store behaviour for the in-memory and SQLite implementations.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from salon_identity.credentials.models import CredentialEnvelope, Role, SubjectProfile
from salon_identity.credentials.sql_store import SqlCredentialStore
from salon_identity.credentials.store import ALL_KEYS, InMemoryCredentialStore
from salon_identity.settings import Settings


def _manager_envelope(token: str = "eyJmanager") -> CredentialEnvelope:
    return CredentialEnvelope(
        token=token,
        subject_profile=SubjectProfile(identifier="m42", name="Sana", phone="555-0101"),
        is_authenticated=True,
    )


@pytest.mark.asyncio
async def test_memory_store_uses_the_app_record_layout() -> None:
    store = InMemoryCredentialStore()
    await store.put(Role.manager, _manager_envelope())

    record = json.loads(store.raw()["managerAuth"])
    assert record == {
        "token": "eyJmanager",
        "isAuthenticated": True,
        "manager": {"_id": "m42", "name": "Sana", "phone": "555-0101"},
    }

    loaded = await store.get(Role.manager)
    assert loaded == _manager_envelope()
    assert await store.get(Role.admin) is None


@pytest.mark.asyncio
async def test_reads_records_written_by_older_builds() -> None:
    raw = json.dumps(
        {
            "token": "face_auth_1_m42",
            "manager": {"_id": "m42", "name": "Sana", "livePicture": "https://cdn.example/m.jpg"},
            "isAuthenticated": True,
        }
    )
    store = InMemoryCredentialStore({"managerAuth": raw})
    env = await store.get(Role.manager)
    assert env is not None
    assert env.subject_profile is not None
    assert env.subject_profile.identifier == "m42"
    assert env.subject_profile.reference_image_url == "https://cdn.example/m.jpg"


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["not json", "[]", json.dumps({"token": "", "isAuthenticated": True})])
async def test_corrupt_or_tokenless_envelope_reads_as_absent(raw: str) -> None:
    store = InMemoryCredentialStore({"adminAuth": raw})
    assert await store.get(Role.admin) is None


@pytest.mark.asyncio
async def test_memory_clear_all_removes_every_auth_key_only() -> None:
    items = {key: "x" for key in ALL_KEYS}
    items["printerName"] = "TM-20"
    store = InMemoryCredentialStore(items)

    await store.clear_all()

    assert store.raw() == {"printerName": "TM-20"}


@pytest.mark.asyncio
async def test_sql_store_persists_and_clears(tmp_path: Path) -> None:
    settings = Settings(env="test", store_url=f"sqlite+aiosqlite:///{tmp_path / 'creds.db'}")

    store = await SqlCredentialStore.open(settings)
    try:
        await store.put(Role.manager, _manager_envelope("face_auth_1_m42"))
        await store.put(Role.manager, _manager_envelope("eyJupgraded"))
        await store.put_scalar("managerToken", "eyJlegacy")
        await store.put_scalar("adminFullName", "Ayesha")
    finally:
        await store.close()

    # A fresh engine sees what the first one committed.
    reopened = await SqlCredentialStore.open(settings)
    try:
        env = await reopened.get(Role.manager)
        assert env == _manager_envelope("eyJupgraded")
        assert await reopened.get_scalar("managerToken") == "eyJlegacy"

        await reopened.clear_all()

        assert await reopened.get(Role.manager) is None
        assert await reopened.get_scalar("managerToken") is None
        assert await reopened.get_scalar("adminFullName") is None
    finally:
        await reopened.close()
