"""Global constants for the matchday application."""

from __future__ import annotations

from enum import Enum

# Collection names
TOURNAMENTS_COLLECTION = "tournaments"
MATCHES_COLLECTION = "matches"
TEAMS_COLLECTION = "teams"
PLAYERS_COLLECTION = "players"
USERS_COLLECTION = "users"

DEFAULT_VENUE = "TBD Venue"

# Roles carried in the identity token's custom claims
ROLE_ADMIN = "admin"
ROLE_COORDINATOR = "coordinator"
ROLE_MANAGER = "manager"
ROLE_SPECTATOR = "spectator"

# Round labels
FINAL = "Final"
SEMIFINAL = "Semifinal"
QUARTERFINAL = "Quarterfinal"
ROUND_OF_16 = "Round of 16"


class Sport(str, Enum):
    """Sports a tournament can be played in."""

    FOOTBALL = "football"
    CRICKET = "cricket"
    BADMINTON = "badminton"
    VOLLEYBALL = "volleyball"
    MULTI = "multi"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> Sport | None:
        """Return the matching member, or None for an unlisted sport."""
        try:
            return cls(value)
        except ValueError:
            return None


class Format(str, Enum):
    """Tournament formats."""

    SINGLE_ELIMINATION = "single-elimination"
    ROUND_ROBIN = "round-robin"
    GROUP_STAGE = "group-stage"


class ParticipantsType(str, Enum):
    """Kind of entity registered into a tournament."""

    TEAM = "Team"
    PLAYER = "Player"


class TournamentStatus(str, Enum):
    """Tournament lifecycle, one-directional."""

    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class MatchStatus(str, Enum):
    """Match lifecycle."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"


VENUE_TYPES = ("off", "single", "multi")
