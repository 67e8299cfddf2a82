"""
salon_identity.stub.directory

In-memory people directory and comparison score table for the stub backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StubDirectory:
    """
    `people` are backend-shaped records (`_id`, `name`, `role`, `livePicture`).
    `scores[probe_label][reference_url]` is the confidence the compare route
    reports; the probe label is the uploaded file's content decoded as UTF-8.
    """

    people: list[dict[str, Any]] = field(default_factory=list)
    scores: dict[str, dict[str, float]] = field(default_factory=dict)
    notifications: list[dict[str, Any]] = field(default_factory=list)
    match_floor: float = 50.0

    def find(self, role: str, identity_id: str) -> dict[str, Any] | None:
        for person in self.people:
            if person.get("role") == role and str(person.get("_id")) == identity_id:
                return person
        return None

    def score(self, probe_label: str, reference_url: str) -> float:
        return float(self.scores.get(probe_label, {}).get(reference_url, 0.0))


def demo_directory() -> StubDirectory:
    people = [
        {"_id": "a1", "name": "Ayesha", "role": "admin", "livePicture": "https://cdn.example/a1.jpg"},
        {"_id": "m42", "name": "Sana", "role": "manager", "livePicture": "https://cdn.example/m42.jpg"},
        {"_id": "e7", "name": "Ravi", "role": "employee", "livePicture": "https://cdn.example/e7.jpg"},
        {"_id": "e8", "name": "Imran", "role": "employee"},
    ]
    scores = {
        "sana": {"https://cdn.example/m42.jpg": 93.5},
        "ravi": {"https://cdn.example/e7.jpg": 88.0, "https://cdn.example/m42.jpg": 12.0},
    }
    notifications = [
        {
            "_id": "n1",
            "title": "Advance salary request",
            "message": "Ravi requested an advance",
            "type": "info",
            "createdAt": "2026-10-01T09:00:00Z",
            "isRead": False,
        }
    ]
    return StubDirectory(people=people, scores=scores, notifications=notifications)
