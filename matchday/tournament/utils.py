"""Utility functions for tournament standings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from matchday.core.constants import MATCHES_COLLECTION, MatchStatus, Sport
from matchday.core.types import ParticipantRef

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


@dataclass(frozen=True)
class PointsScheme:
    """How a sport turns match outcomes into table points."""

    win: int
    draw: int
    loss: int
    use_difference: bool
    decide_by_winner_id: bool
    columns: tuple[tuple[str, str], ...]


GOALS_SCHEME = PointsScheme(
    win=3,
    draw=1,
    loss=0,
    use_difference=True,
    decide_by_winner_id=False,
    columns=(
        ("rank", "#"),
        ("name", "Name"),
        ("played", "P"),
        ("wins", "W"),
        ("losses", "L"),
        ("draws", "D"),
        ("scored", "F"),
        ("conceded", "A"),
        ("difference", "Diff"),
        ("points", "Pts"),
    ),
)

MATCH_POINTS_SCHEME = PointsScheme(
    win=2,
    draw=1,
    loss=0,
    use_difference=False,
    decide_by_winner_id=False,
    columns=(
        ("rank", "#"),
        ("name", "Name"),
        ("played", "P"),
        ("wld", "W-L-D"),
        ("points", "Pts"),
    ),
)

DEFAULT_SCHEME = PointsScheme(
    win=3,
    draw=1,
    loss=0,
    use_difference=False,
    decide_by_winner_id=True,
    columns=(
        ("rank", "#"),
        ("name", "Name"),
        ("played", "P"),
        ("wins", "W"),
        ("losses", "L"),
        ("draws", "D"),
        ("points", "Pts"),
    ),
)

SCHEMES = {
    Sport.FOOTBALL: GOALS_SCHEME,
    Sport.VOLLEYBALL: GOALS_SCHEME,
    Sport.MULTI: GOALS_SCHEME,
    Sport.OTHER: GOALS_SCHEME,
    Sport.CRICKET: MATCH_POINTS_SCHEME,
    Sport.BADMINTON: MATCH_POINTS_SCHEME,
}


def scheme_for_sport(sport: str | None) -> PointsScheme:
    """Pick the points scheme for ``sport``; unlisted sports get the default."""
    parsed = Sport.parse(sport)
    if parsed is None:
        return DEFAULT_SCHEME
    return SCHEMES[parsed]


def fetch_tournament_matches(db: Client, tournament_id: str) -> list[dict[str, Any]]:
    """Fetch all match documents associated with the tournament_id."""
    docs = (
        db.collection(MATCHES_COLLECTION)
        .where(filter=firestore.FieldFilter("tournamentId", "==", tournament_id))
        .stream()
    )
    matches = []
    for doc in docs:
        data = doc.to_dict()
        if data is None:
            continue
        data["id"] = doc.id
        matches.append(data)
    return matches


def _initialize_rows(
    participants: Sequence[ParticipantRef],
) -> dict[str, dict[str, Any]]:
    return {
        ref["id"]: {
            "id": ref["id"],
            "name": ref.get("name") or "Unknown",
            "played": 0,
            "wins": 0,
            "losses": 0,
            "draws": 0,
            "scored": 0,
            "conceded": 0,
            "points": 0,
        }
        for ref in participants
    }


def _score_pair(match: dict[str, Any]) -> tuple[int, int]:
    scores = match.get("scores") or {}
    return int(scores.get("teamA") or 0), int(scores.get("teamB") or 0)


def _outcome(match: dict[str, Any], id_a: str, scheme: PointsScheme) -> int:
    """Return 1 if side A won, -1 if side B won, 0 for a draw."""
    if scheme.decide_by_winner_id:
        winner_id = match.get("winnerId")
        if not winner_id:
            return 0
        return 1 if winner_id == id_a else -1

    score_a, score_b = _score_pair(match)
    if score_a > score_b:
        return 1
    if score_b > score_a:
        return -1
    return 0


def aggregate_match_data(
    participants: Sequence[ParticipantRef],
    matches: Iterable[dict[str, Any]],
    scheme: PointsScheme,
) -> dict[str, dict[str, Any]]:
    """Fold completed matches into one counter row per registered participant."""
    rows = _initialize_rows(participants)

    for match in matches:
        if match.get("status") != MatchStatus.COMPLETED.value:
            continue
        teams = match.get("teams") or []
        if len(teams) != 2:
            continue
        id_a, id_b = teams
        if id_a not in rows or id_b not in rows:
            continue

        row_a, row_b = rows[id_a], rows[id_b]
        score_a, score_b = _score_pair(match)

        row_a["played"] += 1
        row_b["played"] += 1
        row_a["scored"] += score_a
        row_a["conceded"] += score_b
        row_b["scored"] += score_b
        row_b["conceded"] += score_a

        outcome = _outcome(match, id_a, scheme)
        if outcome == 1:
            row_a["wins"] += 1
            row_b["losses"] += 1
            row_a["points"] += scheme.win
            row_b["points"] += scheme.loss
        elif outcome == -1:
            row_b["wins"] += 1
            row_a["losses"] += 1
            row_b["points"] += scheme.win
            row_a["points"] += scheme.loss
        else:
            row_a["draws"] += 1
            row_b["draws"] += 1
            row_a["points"] += scheme.draw
            row_b["points"] += scheme.draw

    return rows


def sort_and_format_standings(
    raw_standings: dict[str, dict[str, Any]], scheme: PointsScheme
) -> list[dict[str, Any]]:
    """Convert the map to a list, sort it and assign ranks 1..N."""
    standings_list = []
    for row in raw_standings.values():
        standings_list.append(
            {
                **row,
                "difference": row["scored"] - row["conceded"],
                "wld": f"{row['wins']}-{row['losses']}-{row['draws']}",
            }
        )

    # Python's sort is stable, so equal rows keep registration order.
    if scheme.use_difference:
        standings_list.sort(key=lambda x: (x["points"], x["difference"]), reverse=True)
    else:
        standings_list.sort(key=lambda x: x["points"], reverse=True)

    for index, row in enumerate(standings_list):
        row["rank"] = index + 1
    return standings_list


def compute_standings(
    tournament: dict[str, Any], matches: Iterable[dict[str, Any]]
) -> dict[str, Any]:
    """Build the leaderboard rows and column layout for a tournament."""
    scheme = scheme_for_sport(tournament.get("sport"))
    participants = tournament.get("registeredParticipants") or []
    raw_standings = aggregate_match_data(participants, matches, scheme)
    return {
        "rows": sort_and_format_standings(raw_standings, scheme),
        "columns": [{"key": key, "label": label} for key, label in scheme.columns],
    }


def get_tournament_standings(
    db: Client, tournament: dict[str, Any]
) -> dict[str, Any]:
    """Orchestrate the calculation of tournament standings."""
    matches = fetch_tournament_matches(db, tournament["id"])
    return compute_standings(tournament, matches)
