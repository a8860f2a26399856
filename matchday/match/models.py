"""Data models for the match blueprint."""

from __future__ import annotations

from typing import Any, Optional, TypedDict

from matchday.core.constants import MatchStatus
from matchday.core.types import FirestoreDocument


class ParticipantSlot(TypedDict, total=False):
    """One side of a match with its sport-specific score data."""

    entityId: str
    participantModel: str
    name: str
    scoreData: dict[str, Any]
    isWinner: bool


class Score(TypedDict, total=False):
    """Primary metric of each side, aligned with ``teams``."""

    teamA: int
    teamB: int


class Match(FirestoreDocument, total=False):
    """A match document in Firestore."""

    tournamentId: str
    sportType: str
    teams: list[str]
    participants: list[ParticipantSlot]
    scores: Optional[Score]
    winnerId: Optional[str]
    tieBreakOverride: bool
    round: str
    roundNumber: int
    matchNumber: int
    status: str
    venue: str
    scheduledTime: Any
    coordinatorId: str


# Moves a coordinator may make by hand; completion only happens by scoring.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    MatchStatus.SCHEDULED.value: frozenset(
        {
            MatchStatus.IN_PROGRESS.value,
            MatchStatus.RESCHEDULED.value,
            MatchStatus.CANCELLED.value,
        }
    ),
    MatchStatus.RESCHEDULED.value: frozenset(
        {
            MatchStatus.SCHEDULED.value,
            MatchStatus.IN_PROGRESS.value,
            MatchStatus.CANCELLED.value,
        }
    ),
    MatchStatus.IN_PROGRESS.value: frozenset(
        {MatchStatus.RESCHEDULED.value, MatchStatus.CANCELLED.value}
    ),
    MatchStatus.CANCELLED.value: frozenset({MatchStatus.RESCHEDULED.value}),
    MatchStatus.COMPLETED.value: frozenset(),
}
