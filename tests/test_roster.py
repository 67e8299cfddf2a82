"""
tests.test_roster

Roster building and role ordering.
"""

from __future__ import annotations

import pytest
from conftest import entry

from salon_identity.matching.roster import MatchResult, build_roster, prioritize


def test_build_roster_filters_and_keeps_order() -> None:
    records = [
        {"_id": "e1", "name": "Ravi", "role": "Employee", "livePicture": "https://cdn.example/e1.jpg"},
        {"_id": "e2", "name": "Imran", "role": "employee"},
        {"_id": "m1", "name": "Sana", "role": "manager", "livePicture": "https://cdn.example/m1.jpg"},
        {"_id": "c1", "name": "Client", "role": "client", "livePicture": "https://cdn.example/c1.jpg"},
        {"name": "No id", "role": "employee", "livePicture": "https://cdn.example/x.jpg"},
        {"employeeId": 17, "_id": "x", "name": "Numbered", "role": "admin", "livePicture": "u"},
    ]

    roster = build_roster(records)

    assert [e.identifier for e in roster] == ["e1", "m1", "17"]
    assert roster[0].role_tag == "employee"
    assert roster[0].reference_image_url == "https://cdn.example/e1.jpg"


def test_build_roster_role_filter() -> None:
    records = [
        {"_id": "e1", "role": "employee", "livePicture": "u1"},
        {"_id": "m1", "role": "manager", "livePicture": "u2"},
    ]
    assert [e.identifier for e in build_roster(records, roles=("manager",))] == ["m1"]


def test_prioritize_is_stable_by_role() -> None:
    roster = [entry(1), entry(2, "manager"), entry(3), entry(4, "admin"), entry(5, "manager")]

    ordered = prioritize(roster, ("manager", "employee"))

    assert [e.identifier for e in ordered] == ["id2", "id5", "id1", "id3", "id4"]


def test_match_result_invariants() -> None:
    assert MatchResult.no_match(42.0) == MatchResult(matched=False, confidence=42.0)
    with pytest.raises(ValueError):
        MatchResult(matched=True, confidence=90.0)
    with pytest.raises(ValueError):
        MatchResult(matched=False, confidence=10.0, candidate=entry(1))


def test_entry_to_profile() -> None:
    profile = entry(7, "manager").to_profile()
    assert profile.identifier == "id7"
    assert profile.name == "Person 7"
    assert profile.reference_image_url == "https://cdn.example/7.jpg"
