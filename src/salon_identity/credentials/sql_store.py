"""
salon_identity.credentials.sql_store

Persistent credential store on async SQLAlchemy.

Responsibilities:
- Persist envelopes and scalars as key/value rows.
- Make every write a whole-row replacement inside one transaction.
- Remove every auth key in a single transaction on logout.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from salon_identity.credentials.models import CredentialEnvelope, Role
from salon_identity.credentials.store import (
    ALL_KEYS,
    ENVELOPE_KEYS,
    decode_envelope,
    encode_envelope,
)
from salon_identity.db.init_db import init_db
from salon_identity.db.models import CredentialItem
from salon_identity.db.session import create_engine, create_sessionmaker
from salon_identity.observability.logging import get_logger
from salon_identity.settings import Settings

log = get_logger(__name__)


class SqlCredentialStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._sf = session_factory
        self._engine = engine

    @classmethod
    async def open(cls, settings: Settings) -> SqlCredentialStore:
        engine = create_engine(settings)
        await init_db(engine)
        return cls(create_sessionmaker(engine), engine=engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    async def _read(self, key: str) -> str | None:
        async with self._sf() as session:
            stmt = select(CredentialItem.value).where(CredentialItem.key == key)
            return (await session.execute(stmt)).scalar_one_or_none()

    async def _write(self, key: str, value: str) -> None:
        async with self._sf() as session, session.begin():
            # merge = upsert by primary key; the row is replaced as a whole.
            await session.merge(CredentialItem(key=key, value=value))

    async def get(self, role: Role) -> CredentialEnvelope | None:
        return decode_envelope(role, await self._read(ENVELOPE_KEYS[role]))

    async def put(self, role: Role, envelope: CredentialEnvelope) -> None:
        await self._write(ENVELOPE_KEYS[role], encode_envelope(role, envelope))

    async def get_scalar(self, key: str) -> str | None:
        return await self._read(key)

    async def put_scalar(self, key: str, value: str) -> None:
        await self._write(key, value)

    async def clear_all(self) -> None:
        async with self._sf() as session, session.begin():
            result = await session.execute(
                delete(CredentialItem).where(CredentialItem.key.in_(ALL_KEYS))
            )
        log.info("credentials_cleared", rows=result.rowcount)


# --- Module Notes -----------------------------------------------------------
# SQLite gives atomic per-row writes, which is all the resolver needs: racing
# exchanges of the same pseudo-token write equivalent envelopes.
