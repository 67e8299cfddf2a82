"""
salon_identity.db.init_db

Schema bootstrap for the credential store.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from salon_identity.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Create the credential table if it does not exist. The schema is a single
    key/value table, so there is no migration workflow.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
