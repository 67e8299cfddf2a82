"""
salon_identity.matching.matcher

Face roster matcher: sequential, first-acceptable-match scan.

Responsibilities:
- Compare a probe image against each roster entry, one remote call at a time.
- Yield acceptances lazily so a scan stops paying for calls once it has its answer.
- Log and skip per-entry comparison failures.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from salon_identity.clients.backend_http import BackendClient, Probe
from salon_identity.credentials.models import Scope
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.errors import ComparisonCallFailed, NoCandidates, NoCredential
from salon_identity.matching.roster import MatchResult, RosterEntry
from salon_identity.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ComparisonOutcome:
    match: bool
    confidence: float


class FaceComparer(Protocol):
    async def compare(self, probe: Probe, entry: RosterEntry) -> ComparisonOutcome: ...


def parse_outcome(candidate_id: str, body: Any) -> ComparisonOutcome:
    if not isinstance(body, dict):
        raise ComparisonCallFailed(candidate_id, "response is not an object")
    confidence = body.get("confidence", 0)
    if isinstance(confidence, bool) or not isinstance(confidence, int | float):
        raise ComparisonCallFailed(candidate_id, f"bad confidence {confidence!r}")
    return ComparisonOutcome(match=body.get("match") is True, confidence=float(confidence))


class BackendFaceComparer:
    """
    Compares through the backend's compare-faces route. A token is resolved per
    call so a pseudo-token upgraded mid-scan is picked up by the next entry.
    """

    def __init__(
        self,
        *,
        client: BackendClient,
        resolver: TokenResolver,
        scope: Scope = Scope.any,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._scope = scope

    async def compare(self, probe: Probe, entry: RosterEntry) -> ComparisonOutcome:
        try:
            token: str | None = await self._resolver.resolve(self._scope)
        except NoCredential:
            # The compare route has accepted anonymous calls in some deployments.
            token = None
        try:
            body = await self._client.compare_faces(token, probe, entry.reference_image_url)
        except httpx.HTTPStatusError as e:
            raise ComparisonCallFailed(entry.identifier, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ComparisonCallFailed(entry.identifier, str(e) or type(e).__name__) from e
        except (OSError, ValueError) as e:
            raise ComparisonCallFailed(entry.identifier, str(e)) from e
        return parse_outcome(entry.identifier, body)


class FaceRosterMatcher:
    def __init__(self, comparer: FaceComparer, *, threshold: float = 80.0) -> None:
        self._comparer = comparer
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    async def _outcomes(
        self, probe: Probe, roster: Sequence[RosterEntry]
    ) -> AsyncIterator[tuple[RosterEntry, ComparisonOutcome]]:
        for position, entry in enumerate(roster, start=1):
            try:
                outcome = await self._comparer.compare(probe, entry)
            except ComparisonCallFailed as e:
                log.warning("comparison_failed", candidate=entry.identifier, reason=e.reason)
                continue
            except Exception as e:
                # One unreachable or corrupt reference image must not abort the scan.
                log.warning(
                    "comparison_failed",
                    candidate=entry.identifier,
                    reason=str(e) or type(e).__name__,
                )
                continue

            log.debug(
                "comparison_done",
                candidate=entry.identifier,
                position=position,
                match=outcome.match,
                confidence=outcome.confidence,
            )
            yield entry, outcome

    async def acceptances(
        self,
        probe: Probe,
        roster: Sequence[RosterEntry],
        *,
        threshold: float | None = None,
    ) -> AsyncIterator[MatchResult]:
        """
        Lazily compare each entry in order and yield every acceptance.

        Each call starts a fresh scan; no comparison happens until the consumer
        asks for the next item.
        """

        limit = self._threshold if threshold is None else threshold
        async for entry, outcome in self._outcomes(probe, roster):
            if outcome.match and outcome.confidence >= limit:
                yield MatchResult(matched=True, confidence=outcome.confidence, candidate=entry)

    async def match_probe(
        self,
        probe: Probe,
        roster: Sequence[RosterEntry],
        *,
        threshold: float | None = None,
    ) -> MatchResult:
        comparable = [e for e in roster if e.reference_image_url]
        if not comparable:
            raise NoCandidates()

        limit = self._threshold if threshold is None else threshold
        best = 0.0
        scan = self._outcomes(probe, comparable)
        try:
            async for entry, outcome in scan:
                if outcome.match and outcome.confidence >= limit:
                    log.info(
                        "face_matched",
                        candidate=entry.identifier,
                        role=entry.role_tag,
                        confidence=outcome.confidence,
                    )
                    return MatchResult(matched=True, confidence=outcome.confidence, candidate=entry)
                best = max(best, outcome.confidence)
        finally:
            await scan.aclose()

        log.info("face_unmatched", candidates=len(comparable), best_confidence=best)
        return MatchResult.no_match(best)


# --- Module Notes -----------------------------------------------------------
# Comparisons are strictly sequential: parallel fan-out would make the winner
# depend on response timing when two entries clear the threshold.
