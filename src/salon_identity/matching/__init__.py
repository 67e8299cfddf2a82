"""
salon_identity.matching

Face roster matching.

Responsibilities:
- Build comparable rosters from backend employee records.
- Scan a roster sequentially for the first acceptable face match.
- Drive the capture screen's state machine.
"""

from salon_identity.matching.matcher import FaceRosterMatcher
from salon_identity.matching.roster import MatchResult, RosterEntry, build_roster

__all__ = ["FaceRosterMatcher", "MatchResult", "RosterEntry", "build_roster"]
