"""
tests.conftest

Shared fakes and fixtures.

Responsibilities:
- Scripted exchanger and face comparer that record every call.
- Settings and store fixtures for resolver-level tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from salon_identity.credentials.models import CredentialEnvelope, Role, SubjectProfile
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.credentials.store import InMemoryCredentialStore
from salon_identity.errors import ExchangeFailed
from salon_identity.matching.matcher import ComparisonOutcome
from salon_identity.matching.roster import RosterEntry
from salon_identity.settings import Settings


class FakeExchanger:
    """Returns scripted tokens per role; a role mapped to None fails."""

    def __init__(self, tokens: dict[Role, str | None] | None = None) -> None:
        self.tokens = tokens or {}
        self.calls: list[tuple[Role, str, str | None]] = []

    async def exchange(self, role: Role, identity_id: str, name: str | None) -> str:
        self.calls.append((role, identity_id, name))
        token = self.tokens.get(role)
        if token is None:
            raise ExchangeFailed(role.value, "rejected", status_code=404)
        return token


class ScriptedComparer:
    """
    Outcome per reference URL. A value that is an exception instance is raised.
    """

    def __init__(self, outcomes: dict[str, ComparisonOutcome | Exception]) -> None:
        self.outcomes = outcomes
        self.calls: list[str] = []

    async def compare(self, probe: Any, entry: RosterEntry) -> ComparisonOutcome:
        self.calls.append(entry.reference_image_url)
        outcome = self.outcomes.get(entry.reference_image_url, ComparisonOutcome(False, 0.0))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def entry(n: int | str, role: str = "employee") -> RosterEntry:
    return RosterEntry(
        identifier=f"id{n}",
        display_name=f"Person {n}",
        role_tag=role,  # type: ignore[arg-type]
        reference_image_url=f"https://cdn.example/{n}.jpg",
    )


def envelope(token: str, identifier: str | None = None, name: str | None = None) -> CredentialEnvelope:
    profile = SubjectProfile(identifier=identifier, name=name) if identifier or name else None
    return CredentialEnvelope(token=token, subject_profile=profile, is_authenticated=True)


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", api_base_url="http://test/api")


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def make_resolver(
    settings: Settings, store: InMemoryCredentialStore
) -> Callable[[FakeExchanger], TokenResolver]:
    def _make(exchanger: FakeExchanger) -> TokenResolver:
        return TokenResolver(store=store, exchanger=exchanger, settings=settings)

    return _make
