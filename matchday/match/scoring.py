"""Sport-specific rules that turn a raw score payload into a match result."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from matchday.core.constants import MatchStatus, Sport
from matchday.errors import (
    InvalidMatchStructure,
    StateConflictError,
    ValidationError,
    WinnerNotAParticipant,
)


@dataclass(frozen=True)
class ScoreResult:
    """Normalized outcome of one scorer.

    ``winner_side`` is 0 for the first participant slot, 1 for the second
    and None for a draw.
    """

    score_data_a: dict[str, Any]
    score_data_b: dict[str, Any]
    primary_a: int
    primary_b: int
    winner_side: Optional[int]


def _read_count(
    payload: dict[str, Any], *keys: str, required: bool = False
) -> int:
    """Return the first present key as a non-negative integer.

    A missing value reads as 0 unless ``required``, in which case it is a
    ValidationError.
    """
    for key in keys:
        value = payload.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            number = int(value)
        elif isinstance(value, int) and not isinstance(value, bool):
            number = value
        elif isinstance(value, float) and value.is_integer():
            number = int(value)
        else:
            raise ValidationError(f"'{key}' must be a whole number.")
        if number < 0:
            raise ValidationError(f"'{key}' cannot be negative.")
        return number
    if required:
        names = " or ".join(f"'{key}'" for key in keys)
        raise ValidationError(f"{names} is required.")
    return 0


def _read_set_scores(payload: dict[str, Any], key: str) -> list[int]:
    raw = payload.get(key) or []
    if not isinstance(raw, list):
        raise ValidationError(f"'{key}' must be a list of set scores.")
    return [_read_count({key: value}, key) for value in raw]


def _decide(primary_a: int, primary_b: int) -> Optional[int]:
    if primary_a > primary_b:
        return 0
    if primary_b > primary_a:
        return 1
    return None


def score_final_score(payload: dict[str, Any]) -> ScoreResult:
    """Football, volleyball, multi and other: higher final score wins."""
    score_a = _read_count(payload, "finalScoreA", "scoreA", required=True)
    score_b = _read_count(payload, "finalScoreB", "scoreB", required=True)
    return ScoreResult(
        score_data_a={"finalScore": score_a},
        score_data_b={"finalScore": score_b},
        primary_a=score_a,
        primary_b=score_b,
        winner_side=_decide(score_a, score_b),
    )


def score_cricket(payload: dict[str, Any]) -> ScoreResult:
    """Cricket: more runs wins, equal runs is a tie."""
    runs_a = _read_count(payload, "runsA", required=True)
    runs_b = _read_count(payload, "runsB", required=True)
    return ScoreResult(
        score_data_a={"runs": runs_a, "wickets": _read_count(payload, "wicketsA")},
        score_data_b={"runs": runs_b, "wickets": _read_count(payload, "wicketsB")},
        primary_a=runs_a,
        primary_b=runs_b,
        winner_side=_decide(runs_a, runs_b),
    )


def score_badminton(payload: dict[str, Any]) -> ScoreResult:
    """Badminton: more sets won wins."""
    sets_a = _read_count(payload, "setsWonA", required=True)
    sets_b = _read_count(payload, "setsWonB", required=True)
    return ScoreResult(
        score_data_a={
            "setsWon": sets_a,
            "setScores": _read_set_scores(payload, "setScoresA"),
        },
        score_data_b={
            "setsWon": sets_b,
            "setScores": _read_set_scores(payload, "setScoresB"),
        },
        primary_a=sets_a,
        primary_b=sets_b,
        winner_side=_decide(sets_a, sets_b),
    )


def score_generic(payload: dict[str, Any]) -> ScoreResult:
    """Fallback for sports without their own rules."""
    score_a = _read_count(payload, "finalScoreA", "scoreA", required=True)
    score_b = _read_count(payload, "finalScoreB", "scoreB", required=True)
    return ScoreResult(
        score_data_a={"score": score_a},
        score_data_b={"score": score_b},
        primary_a=score_a,
        primary_b=score_b,
        winner_side=_decide(score_a, score_b),
    )


Scorer = Callable[[dict[str, Any]], ScoreResult]

SCORERS: dict[Sport, Scorer] = {
    Sport.FOOTBALL: score_final_score,
    Sport.VOLLEYBALL: score_final_score,
    Sport.MULTI: score_final_score,
    Sport.OTHER: score_final_score,
    Sport.CRICKET: score_cricket,
    Sport.BADMINTON: score_badminton,
}


def scorer_for(sport: str | None) -> Scorer:
    """Return the scorer for ``sport``; unlisted sports use the generic one."""
    parsed = Sport.parse(sport)
    if parsed is None:
        return score_generic
    return SCORERS[parsed]


def _participant_slots(match: dict[str, Any]) -> list[dict[str, Any]]:
    slots = match.get("participants") or []
    if len(slots) != 2 or not all(slot and slot.get("entityId") for slot in slots):
        raise InvalidMatchStructure()
    return slots


def _flagged(slots: list[dict[str, Any]], winner_id: Optional[str]) -> list[dict[str, Any]]:
    return [{**slot, "isWinner": slot["entityId"] == winner_id} for slot in slots]


def apply_result(
    match: dict[str, Any], payload: dict[str, Any], final: bool = True
) -> dict[str, Any]:
    """Score ``payload`` against ``match`` and return the fields to write.

    Winner flags are recomputed from scratch, so applying the same payload
    twice yields the same fields. A live (not ``final``) score never names
    a winner.
    """
    slots = _participant_slots(match)
    result = scorer_for(match.get("sportType"))(payload)

    winner_id = None
    if final and result.winner_side is not None:
        winner_id = slots[result.winner_side]["entityId"]

    slot_a = {**slots[0], "scoreData": result.score_data_a}
    slot_b = {**slots[1], "scoreData": result.score_data_b}
    return {
        "participants": _flagged([slot_a, slot_b], winner_id),
        "scores": {"teamA": result.primary_a, "teamB": result.primary_b},
        "winnerId": winner_id,
        "tieBreakOverride": False,
    }


def apply_tie_break(match: dict[str, Any], winner_id: str) -> dict[str, Any]:
    """Pick the winner of a drawn match without touching its scores."""
    slots = _participant_slots(match)
    if winner_id not in {slot["entityId"] for slot in slots}:
        raise WinnerNotAParticipant(
            f"'{winner_id}' is not a participant in this match."
        )
    if match.get("status") != MatchStatus.COMPLETED.value:
        raise StateConflictError("Only a completed match can have its tie resolved.")
    if match.get("winnerId"):
        raise StateConflictError("This match already has a winner.")

    return {
        "participants": _flagged(slots, winner_id),
        "winnerId": winner_id,
        "tieBreakOverride": True,
    }
