"""
salon_identity.matching.session

Capture-screen state machine.

Responsibilities:
- Track `IDLE -> CAPTURING -> COMPARING -> {MATCHED -> HANDED_OFF, UNMATCHED, ERROR} -> IDLE`.
- Refuse a second capture while one is running.
- Convert every capture failure into a settled state plus an actionable message.
- Provide the stock roster source and face-login hand-off used by the screens.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import structlog

from salon_identity.clients.backend_http import BackendClient, Probe
from salon_identity.credentials.models import Role, Scope
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.errors import UNMATCHED_MESSAGE, CaptureInProgress, describe_error
from salon_identity.matching.matcher import FaceRosterMatcher
from salon_identity.matching.roster import (
    ROLE_TAGS,
    MatchResult,
    RoleTag,
    RosterEntry,
    build_roster,
    prioritize,
)
from salon_identity.observability.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

Camera = Callable[[], Awaitable[Probe]]
RosterSource = Callable[[], Awaitable[Sequence[RosterEntry]]]


class CaptureState(enum.StrEnum):
    idle = "IDLE"
    capturing = "CAPTURING"
    comparing = "COMPARING"
    matched = "MATCHED"
    unmatched = "UNMATCHED"
    error = "ERROR"
    handed_off = "HANDED_OFF"


_BUSY = frozenset({CaptureState.capturing, CaptureState.comparing, CaptureState.handed_off})

_ALLOWED: dict[CaptureState, frozenset[CaptureState]] = {
    CaptureState.idle: frozenset({CaptureState.capturing}),
    CaptureState.capturing: frozenset({CaptureState.comparing, CaptureState.error}),
    CaptureState.comparing: frozenset(
        {CaptureState.matched, CaptureState.unmatched, CaptureState.error}
    ),
    CaptureState.matched: frozenset({CaptureState.handed_off, CaptureState.idle}),
    CaptureState.unmatched: frozenset({CaptureState.idle}),
    CaptureState.error: frozenset({CaptureState.idle}),
    CaptureState.handed_off: frozenset({CaptureState.idle, CaptureState.error}),
}


class CaptureSession:
    """
    One capture screen. `capture()` never raises for capture/compare failures;
    it settles the session and exposes `last_error` / `message` for the UI.
    """

    def __init__(
        self,
        *,
        matcher: FaceRosterMatcher,
        camera: Camera,
        roster_source: RosterSource,
        threshold: float | None = None,
    ) -> None:
        self._matcher = matcher
        self._camera = camera
        self._roster_source = roster_source
        self._threshold = threshold

        self._state = CaptureState.idle
        self.history: list[tuple[CaptureState, CaptureState]] = []
        self.last_result: MatchResult | None = None
        self.last_error: BaseException | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in _BUSY

    @property
    def message(self) -> str | None:
        if self.last_error is not None:
            return describe_error(self.last_error)
        if self.last_result is not None and not self.last_result.matched:
            return UNMATCHED_MESSAGE
        return None

    def _transition(self, to: CaptureState) -> None:
        if to not in _ALLOWED[self._state]:
            raise RuntimeError(f"illegal capture transition {self._state} -> {to}")
        self.history.append((self._state, to))
        log.debug("capture_state", from_state=self._state.value, to_state=to.value)
        self._state = to

    async def capture(self) -> MatchResult | None:
        # Check-and-set happens before the first await, so it cannot interleave.
        if self.busy:
            raise CaptureInProgress()
        if self._state is CaptureState.matched:
            # A new capture discards a match nobody handed off.
            self._transition(CaptureState.idle)

        self.last_result = None
        self.last_error = None
        self._transition(CaptureState.capturing)

        structlog.contextvars.bind_contextvars(capture_id=uuid.uuid4().hex)
        try:
            probe = await self._camera()
            self._transition(CaptureState.comparing)
            roster = await self._roster_source()
            result = await self._matcher.match_probe(probe, roster, threshold=self._threshold)
        except Exception as e:
            log.warning("capture_failed", error=str(e) or type(e).__name__, kind=type(e).__name__)
            self.last_error = e
            self._transition(CaptureState.error)
            self._transition(CaptureState.idle)
            return None
        finally:
            structlog.contextvars.unbind_contextvars("capture_id")

        self.last_result = result
        if result.matched:
            self._transition(CaptureState.matched)
        else:
            self._transition(CaptureState.unmatched)
            self._transition(CaptureState.idle)
        return result

    async def hand_off(self, callback: Callable[[MatchResult], Awaitable[T]]) -> T:
        if self._state is not CaptureState.matched or self.last_result is None:
            raise RuntimeError("nothing to hand off: no pending match")

        self._transition(CaptureState.handed_off)
        try:
            value = await callback(self.last_result)
        except Exception as e:
            self.last_error = e
            self._transition(CaptureState.error)
            self._transition(CaptureState.idle)
            raise
        self._transition(CaptureState.idle)
        return value


def backend_roster_source(
    *,
    client: BackendClient,
    resolver: TokenResolver,
    roles: Sequence[RoleTag] = ROLE_TAGS,
    role_order: Sequence[RoleTag] | None = None,
    scope: Scope = Scope.any,
) -> RosterSource:
    """
    Roster loader for a capture screen. `role_order` decides who is compared
    first; attendance uses employees first, advance salary managers first.
    """

    async def load() -> list[RosterEntry]:
        token = await resolver.resolve(scope)
        roster = build_roster(await client.fetch_roster(token), roles=roles)
        if role_order:
            roster = prioritize(roster, role_order)
        log.info("roster_loaded", size=len(roster))
        return roster

    return load


def face_login_hand_off(
    resolver: TokenResolver,
) -> Callable[[MatchResult], Awaitable[str]]:
    """
    Hand-off for the login screens: store a pseudo-token envelope for the
    identified manager/admin, then exchange it right away.
    """

    async def hand_off(result: MatchResult) -> str:
        entry = result.candidate
        if entry is None or entry.role_tag not in (Role.admin.value, Role.manager.value):
            raise ValueError("only managers and admins can log in by face")
        role = Role(entry.role_tag)
        await resolver.establish_face_session(role, entry.to_profile())
        scope = Scope.admin_only if role is Role.admin else Scope.manager_only
        return await resolver.resolve(scope)

    return hand_off


# --- Module Notes -----------------------------------------------------------
# Cancellation is not supported: a capture runs to completion or failure.
