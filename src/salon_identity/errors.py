"""
salon_identity.errors

Domain exceptions for credential resolution and face identification.

Responsibilities:
- Name each failure the subsystem can surface (or deliberately swallow).
- Map failures to actionable user-facing messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class IdentityError(Exception):
    """Base class for every error raised by this package."""


class NoCredential(IdentityError):
    """
    No envelope for the requested scope yields a usable token, even after
    exchange attempts. The UI answers this by forcing a re-login.
    """

    def __init__(self, scope: str) -> None:
        super().__init__(f"no usable credential for scope {scope!r}")
        self.scope = scope


class ExchangeFailed(IdentityError):
    """
    The face-login endpoint rejected the identity or could not be reached.
    Non-fatal to the resolver loop; it moves on to the next role.
    """

    def __init__(self, role: str, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(f"face-login exchange failed for {role}: {reason}")
        self.role = role
        self.reason = reason
        self.status_code = status_code


class AuthorizationRejected(IdentityError):
    """
    The server rejected a token at call time and the single retry did not help.
    Only raised when the caller opts in; by default the response is returned.
    """

    def __init__(self, response: Mapping[str, Any]) -> None:
        super().__init__(str(response.get("error") or "authorization rejected"))
        self.response = dict(response)


class NoCandidates(IdentityError):
    """The roster holds no entries with a reference image to compare against."""

    def __init__(self) -> None:
        super().__init__("no registered faces to compare against")


class ComparisonCallFailed(IdentityError):
    """A single roster comparison failed. The matcher logs it and moves on."""

    def __init__(self, candidate_id: str, reason: str) -> None:
        super().__init__(f"comparison against {candidate_id} failed: {reason}")
        self.candidate_id = candidate_id
        self.reason = reason


class CaptureInProgress(IdentityError):
    """A capture was requested while the previous one is still running."""

    def __init__(self) -> None:
        super().__init__("a capture is already in progress")


_MESSAGES: dict[type[IdentityError], str] = {
    NoCredential: "Session expired. Please login again.",
    ExchangeFailed: "Could not confirm your face login. Please login again.",
    AuthorizationRejected: "Session expired. Please login again.",
    NoCandidates: "No registered faces found. Please register employees first.",
    ComparisonCallFailed: "Face comparison failed. Please try again.",
    CaptureInProgress: "Please wait, a capture is already being processed.",
}


def describe_error(exc: BaseException) -> str:
    # Walk the MRO so subclasses inherit their parent's message.
    for cls in type(exc).__mro__:
        msg = _MESSAGES.get(cls)  # type: ignore[arg-type]
        if msg is not None:
            return msg
    return "Something went wrong. Please try again."


UNMATCHED_MESSAGE = (
    "Face not recognized. Please ensure you are a registered employee or manager."
)


# --- Module Notes -----------------------------------------------------------
# "Unmatched" is deliberately not an exception: a scan with no acceptance is an
# expected outcome and is returned as `MatchResult(matched=False)`.
