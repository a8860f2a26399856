"""Core module for the matchday application."""

from .constants import Format, MatchStatus, ParticipantsType, Sport, TournamentStatus
from .types import FirestoreDocument, ParticipantRef

__all__ = [
    "FirestoreDocument",
    "Format",
    "MatchStatus",
    "ParticipantRef",
    "ParticipantsType",
    "Sport",
    "TournamentStatus",
]
