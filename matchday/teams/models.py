"""Data models for the teams feature."""

from __future__ import annotations

from typing import TypedDict

from matchday.core.types import FirestoreDocument


class RosterEntry(TypedDict, total=False):
    """A player on a team's roster."""

    playerId: str
    isCaptain: bool


class Team(FirestoreDocument, total=False):
    """A team document in Firestore."""

    name: str
    managerId: str
    roster: list[RosterEntry]
    isReady: bool
    tournamentIds: list[str]


class Player(FirestoreDocument, total=False):
    """A player document in Firestore."""

    name: str
    contactInfo: str
    teamId: str
