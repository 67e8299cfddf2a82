"""
salon_identity.db.models

Persistence schema for the credential store.

Responsibilities:
- Define `CredentialItem`: one row per store key (envelope, legacy scalar or display scalar).
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from salon_identity.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC, matching what SQLite stores without a tz-aware type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class CredentialItem(Base):
    __tablename__ = "credential_items"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Envelopes are stored as their serialized JSON string, never as columns.
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


# --- Module Notes -----------------------------------------------------------
# Key/value on purpose: the envelope layout is owned by `credentials.models`.
