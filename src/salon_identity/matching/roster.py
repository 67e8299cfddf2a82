"""
salon_identity.matching.roster

Roster entries and match results.

Responsibilities:
- Turn raw employee records into comparable `RosterEntry` values.
- Order rosters by role priority for a given capture flow.
- Define `MatchResult`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from salon_identity.credentials.models import SubjectProfile

RoleTag = Literal["employee", "manager", "admin"]
ROLE_TAGS: tuple[RoleTag, ...] = ("employee", "manager", "admin")


@dataclass(frozen=True, slots=True)
class RosterEntry:
    identifier: str
    display_name: str
    role_tag: RoleTag
    reference_image_url: str

    def to_profile(self) -> SubjectProfile:
        return SubjectProfile(
            identifier=self.identifier,
            name=self.display_name,
            reference_image_url=self.reference_image_url,
        )


@dataclass(frozen=True, slots=True)
class MatchResult:
    matched: bool
    confidence: float
    candidate: RosterEntry | None = None

    def __post_init__(self) -> None:
        if self.matched and self.candidate is None:
            raise ValueError("a matched result needs a candidate")
        if not self.matched and self.candidate is not None:
            raise ValueError("an unmatched result carries no candidate")

    @classmethod
    def no_match(cls, best_confidence: float = 0.0) -> MatchResult:
        return cls(matched=False, confidence=best_confidence)


def _record_id(record: Mapping[str, Any]) -> str | None:
    for key in ("employeeId", "_id", "id"):
        value = record.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def build_roster(
    records: Iterable[Mapping[str, Any]],
    *,
    roles: Sequence[RoleTag] = ROLE_TAGS,
) -> list[RosterEntry]:
    """
    Keep records with an allowed role, an id and a reference photo, in the
    order given. Records without a photo cannot be compared and are dropped.
    """

    allowed = {r.lower() for r in roles}
    out: list[RosterEntry] = []
    for record in records:
        role = str(record.get("role") or "").lower()
        url = record.get("livePicture") or record.get("referenceImageUrl")
        identifier = _record_id(record)
        if role not in allowed or not url or identifier is None:
            continue
        out.append(
            RosterEntry(
                identifier=identifier,
                display_name=str(record.get("name") or identifier),
                role_tag=role,  # type: ignore[arg-type]
                reference_image_url=str(url),
            )
        )
    return out


def prioritize(roster: Sequence[RosterEntry], role_order: Sequence[RoleTag]) -> list[RosterEntry]:
    # Stable: within a role the caller's order is kept; unlisted roles go last.
    rank = {role: i for i, role in enumerate(role_order)}
    return sorted(roster, key=lambda e: rank.get(e.role_tag, len(rank)))


# --- Module Notes -----------------------------------------------------------
# The first acceptance ends a scan, so roster order is a product decision:
# attendance puts employees first, advance salary puts managers first.
