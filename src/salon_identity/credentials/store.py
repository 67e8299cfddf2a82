"""
salon_identity.credentials.store

Credential store interface and the in-memory implementation.

Responsibilities:
- Define the key space shared with the app (envelope keys, legacy scalars, display scalars).
- Define the `CredentialStore` protocol the resolver depends on.
- Provide an in-memory store for tests and ephemeral sessions.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from pydantic import ValidationError

from salon_identity.credentials.models import CredentialEnvelope, Role
from salon_identity.observability.logging import get_logger

log = get_logger(__name__)

ENVELOPE_KEYS: dict[Role, str] = {
    Role.admin: "adminAuth",
    Role.manager: "managerAuth",
}

# Older builds stored a bare token per role; read-only now.
LEGACY_TOKEN_KEYS: dict[Role, str] = {
    Role.admin: "authToken",
    Role.manager: "managerToken",
}

DISPLAY_KEYS: tuple[str, ...] = ("adminFullName", "adminEmail", "face_auth_token")

ALL_KEYS: tuple[str, ...] = (
    *ENVELOPE_KEYS.values(),
    *LEGACY_TOKEN_KEYS.values(),
    *DISPLAY_KEYS,
)


class CredentialStore(Protocol):
    async def get(self, role: Role) -> CredentialEnvelope | None: ...

    async def put(self, role: Role, envelope: CredentialEnvelope) -> None: ...

    async def get_scalar(self, key: str) -> str | None: ...

    async def put_scalar(self, key: str, value: str) -> None: ...

    async def clear_all(self) -> None: ...


def encode_envelope(role: Role, envelope: CredentialEnvelope) -> str:
    return json.dumps(envelope.to_record(role), separators=(",", ":"))


def decode_envelope(role: Role, raw: str | None) -> CredentialEnvelope | None:
    """
    Parse a stored envelope. Corrupt or token-less records read as absent.
    """

    if not raw:
        return None
    try:
        record: Any = json.loads(raw)
        if not isinstance(record, dict):
            raise ValueError("envelope record is not an object")
        return CredentialEnvelope.from_record(role, record)
    except (ValueError, ValidationError) as e:
        log.warning("envelope_unreadable", role=role.value, error=str(e))
        return None


class InMemoryCredentialStore:
    """
    Dict-backed store holding the same serialized strings the persistent store
    does, so both exercise the same decode path.
    """

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    async def get(self, role: Role) -> CredentialEnvelope | None:
        return decode_envelope(role, self._items.get(ENVELOPE_KEYS[role]))

    async def put(self, role: Role, envelope: CredentialEnvelope) -> None:
        # Single assignment: readers see the old string or the new one.
        self._items[ENVELOPE_KEYS[role]] = encode_envelope(role, envelope)

    async def get_scalar(self, key: str) -> str | None:
        return self._items.get(key)

    async def put_scalar(self, key: str, value: str) -> None:
        self._items[key] = value

    async def clear_all(self) -> None:
        self._items = {k: v for k, v in self._items.items() if k not in ALL_KEYS}

    def raw(self) -> dict[str, str]:
        return dict(self._items)


# --- Module Notes -----------------------------------------------------------
# `SqlCredentialStore` (credentials.sql_store) is the persistent implementation.
