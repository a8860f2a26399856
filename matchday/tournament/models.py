"""Data models for the tournament blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from matchday.core.types import FirestoreDocument, ParticipantRef


class RegistrationEntry(TypedDict, total=False):
    """One slot of a registration request."""

    name: str
    teamName: str
    teamId: str
    managerId: str
    contactInfo: str


class Tournament(FirestoreDocument, total=False):
    """A tournament document in Firestore."""

    name: str
    sport: str
    format: str
    participantsType: str
    maxParticipants: int
    playersPerTeam: int
    status: str
    venueType: str
    venues: list[str]
    registeredParticipants: list[ParticipantRef]
    adminId: str
    currentRound: int
    winner: str
    startDate: Any
    endDate: Any
    startedAt: Any
    completedAt: Any
