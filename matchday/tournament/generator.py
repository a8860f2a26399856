"""Fixture generation for round robin and single elimination tournaments."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional

from matchday.core.constants import (
    FINAL,
    QUARTERFINAL,
    ROUND_OF_16,
    SEMIFINAL,
    Format,
    MatchStatus,
)
from matchday.core.types import ParticipantRef
from matchday.errors import NotEnoughParticipants, UnsupportedFormat

Slot = Optional[ParticipantRef]


@dataclass(frozen=True)
class BracketPlan:
    """Sizing of a single elimination bracket.

    ``first_round_matches`` counts the entrants who play in the opening
    round; they are paired two per match and the remaining ``byes``
    entrants wait for round two.
    """

    bracket_size: int
    byes: int
    first_round_matches: int


@dataclass(frozen=True)
class MatchSkeleton:
    """A match produced by the generator, before it is persisted."""

    home: ParticipantRef
    away: ParticipantRef
    round: str
    round_number: int
    match_number: int

    def to_dict(self) -> dict[str, Any]:
        """Return the Firestore fields owned by the generator."""
        return {
            "teams": [self.home["id"], self.away["id"]],
            "participants": [
                {
                    "entityId": ref["id"],
                    "name": ref["name"],
                    "scoreData": {},
                    "isWinner": False,
                }
                for ref in (self.home, self.away)
            ],
            "round": self.round,
            "roundNumber": self.round_number,
            "matchNumber": self.match_number,
            "status": MatchStatus.SCHEDULED.value,
            "scores": None,
            "winnerId": None,
        }


def round_name(field_size: int, round_number: int) -> str:
    """Label a knockout round by the number of bracket slots it starts with."""
    labels = {2: FINAL, 4: SEMIFINAL, 8: QUARTERFINAL, 16: ROUND_OF_16}
    return labels.get(field_size, f"Round {round_number}")


class TournamentGenerator:
    """Utility class for generating tournament matches."""

    MIN_PARTICIPANTS = 2

    @staticmethod
    def _require_participants(participants: Sequence[Any]) -> None:
        if len(participants) < TournamentGenerator.MIN_PARTICIPANTS:
            raise NotEnoughParticipants(
                f"At least {TournamentGenerator.MIN_PARTICIPANTS} participants "
                f"are required, got {len(participants)}."
            )

    @staticmethod
    def rotate(slots: tuple[Slot, ...]) -> tuple[Slot, ...]:
        """Keep the first slot fixed and move the last slot to index 1."""
        if len(slots) <= 2:
            return slots
        return (slots[0], slots[-1], *slots[1:-1])

    @staticmethod
    def generate_round_robin(
        participants: Sequence[ParticipantRef],
    ) -> list[MatchSkeleton]:
        """Generate round robin pairings using the circle method."""
        TournamentGenerator._require_participants(participants)

        slots: tuple[Slot, ...] = tuple(participants)
        if len(slots) % 2 != 0:
            slots = (*slots, None)

        num_slots = len(slots)
        matches = []
        for round_index in range(num_slots - 1):
            round_number = round_index + 1
            match_number = 0
            for i in range(num_slots // 2):
                home = slots[i]
                away = slots[num_slots - 1 - i]
                if home is None or away is None:
                    continue
                match_number += 1
                matches.append(
                    MatchSkeleton(
                        home=home,
                        away=away,
                        round=f"Round {round_number}",
                        round_number=round_number,
                        match_number=match_number,
                    )
                )
            slots = TournamentGenerator.rotate(slots)

        return matches

    @staticmethod
    def plan_bracket(num_participants: int) -> BracketPlan:
        """Size the bracket for ``num_participants`` entrants."""
        if num_participants < TournamentGenerator.MIN_PARTICIPANTS:
            raise NotEnoughParticipants(
                f"At least {TournamentGenerator.MIN_PARTICIPANTS} participants "
                f"are required, got {num_participants}."
            )
        bracket_size = 1
        while bracket_size < num_participants:
            bracket_size *= 2
        byes = bracket_size - num_participants
        return BracketPlan(
            bracket_size=bracket_size,
            byes=byes,
            first_round_matches=num_participants - byes,
        )

    @staticmethod
    def pair_round(
        entrants: Sequence[ParticipantRef], label: str, round_number: int
    ) -> list[MatchSkeleton]:
        """Pair entrants 0v1, 2v3, ...; an odd entrant out gets no match."""
        return [
            MatchSkeleton(
                home=entrants[i],
                away=entrants[i + 1],
                round=label,
                round_number=round_number,
                match_number=i // 2 + 1,
            )
            for i in range(0, len(entrants) - 1, 2)
        ]

    @staticmethod
    def generate_single_elimination(
        participants: Sequence[ParticipantRef],
    ) -> list[MatchSkeleton]:
        """Generate the opening round of a knockout bracket seeded in list order."""
        TournamentGenerator._require_participants(participants)

        if len(participants) == 2:
            return [
                MatchSkeleton(
                    home=participants[0],
                    away=participants[1],
                    round=FINAL,
                    round_number=1,
                    match_number=1,
                )
            ]

        plan = TournamentGenerator.plan_bracket(len(participants))
        contested = participants[: plan.first_round_matches]
        return TournamentGenerator.pair_round(
            contested, round_name(plan.bracket_size, 1), 1
        )

    @staticmethod
    def generate_next_round(
        entrants: Sequence[ParticipantRef], round_number: int
    ) -> list[MatchSkeleton]:
        """Pair the entrants advancing into ``round_number``."""
        TournamentGenerator._require_participants(entrants)
        field_size = TournamentGenerator.plan_bracket(len(entrants)).bracket_size
        return TournamentGenerator.pair_round(
            entrants, round_name(field_size, round_number), round_number
        )

    @staticmethod
    def generate(
        participants: Sequence[ParticipantRef], tournament_format: str
    ) -> list[MatchSkeleton]:
        """Build the opening schedule for ``tournament_format``."""
        if tournament_format == Format.ROUND_ROBIN.value:
            return TournamentGenerator.generate_round_robin(participants)
        if tournament_format == Format.SINGLE_ELIMINATION.value:
            return TournamentGenerator.generate_single_elimination(participants)
        raise UnsupportedFormat(
            f"Cannot generate a schedule for format '{tournament_format}'. "
            "Only round-robin and single-elimination are supported."
        )
