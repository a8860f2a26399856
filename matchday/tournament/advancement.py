"""Round state for single elimination brackets.

A bracket is re-derived from the registered participants and the persisted
matches every time it is inspected. Entrants of round one are the
participants in registration order; entrants of each later round are the
entrants of the previous round who either won their match there or had no
match (a bye), kept in their original relative order.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from matchday.core.constants import MatchStatus
from matchday.core.types import ParticipantRef
from matchday.errors import StateConflictError


class BracketPhase(str, Enum):
    """Where an elimination bracket currently stands."""

    AWAITING_SCORES = "awaiting-scores"
    ROUND_COMPLETE = "round-complete"
    FINAL_AWAITING_SCORE = "final-awaiting-score"
    FINAL_COMPLETE = "final-complete"


def summarize_match(match: dict[str, Any]) -> dict[str, Any]:
    """Reduce a match to the fields a caller needs to act on it."""
    return {
        "id": match.get("id"),
        "round": match.get("round"),
        "status": match.get("status"),
        "teams": list(match.get("teams") or []),
        "names": [p.get("name") for p in match.get("participants") or []],
        "scores": match.get("scores"),
    }


@dataclass
class RoundState:
    """The latest generated round of a bracket and what it blocks on."""

    round_number: int
    round_label: str
    entrants: list[ParticipantRef]
    matches: list[dict[str, Any]]
    pending: list[dict[str, Any]] = field(default_factory=list)
    unresolved: list[dict[str, Any]] = field(default_factory=list)
    advancing: list[ParticipantRef] = field(default_factory=list)

    @property
    def is_final(self) -> bool:
        """True when this round is a single match with nobody carried past it."""
        return len(self.matches) == 1 and len(self.entrants) == 2

    @property
    def phase(self) -> BracketPhase:
        """Classify the round by its open matches and whether it is the final."""
        if self.pending:
            if self.is_final:
                return BracketPhase.FINAL_AWAITING_SCORE
            return BracketPhase.AWAITING_SCORES
        if self.is_final and not self.unresolved:
            return BracketPhase.FINAL_COMPLETE
        return BracketPhase.ROUND_COMPLETE

    @property
    def champion(self) -> ParticipantRef | None:
        """The winner of a decided final, otherwise None."""
        if self.phase is not BracketPhase.FINAL_COMPLETE:
            return None
        return self.advancing[0] if self.advancing else None


def _round_state(
    round_number: int,
    entrants: Sequence[ParticipantRef],
    matches: list[dict[str, Any]],
    carry_byes: bool = False,
) -> RoundState:
    pending = [m for m in matches if m.get("status") != MatchStatus.COMPLETED.value]
    unresolved = [
        m
        for m in matches
        if m.get("status") == MatchStatus.COMPLETED.value and not m.get("winnerId")
    ]

    played = {pid for m in matches for pid in m.get("teams") or []}
    winners = {m["winnerId"] for m in matches if m.get("winnerId")}
    advancing = [
        ref
        for ref in entrants
        if ref["id"] in winners or (carry_byes and ref["id"] not in played)
    ]

    return RoundState(
        round_number=round_number,
        round_label=str(matches[0].get("round", f"Round {round_number}")),
        entrants=list(entrants),
        matches=matches,
        pending=pending,
        unresolved=unresolved,
        advancing=advancing,
    )


def _ordered(matches: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(matches, key=lambda m: m.get("matchNumber") or 0)


def analyze_bracket(
    participants: Sequence[ParticipantRef], matches: Sequence[dict[str, Any]]
) -> RoundState:
    """Replay every generated round and return the state of the latest one."""
    rounds: dict[int, list[dict[str, Any]]] = defaultdict(list)
    for match in matches:
        rounds[int(match.get("roundNumber") or 1)].append(match)

    if not rounds:
        raise StateConflictError("No rounds have been generated for this tournament.")

    numbers = sorted(rounds)
    # Byes only exist in the opening round.
    state = _round_state(
        numbers[0], participants, _ordered(rounds[numbers[0]]), carry_byes=True
    )
    for round_number in numbers[1:]:
        state = _round_state(
            round_number, state.advancing, _ordered(rounds[round_number])
        )
    return state
