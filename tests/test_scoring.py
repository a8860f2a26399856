"""Tests for sport-specific match scoring."""

from __future__ import annotations

import unittest
from typing import Any

from matchday.errors import (
    InvalidMatchStructure,
    StateConflictError,
    ValidationError,
    WinnerNotAParticipant,
)
from matchday.match.scoring import apply_result, apply_tie_break, scorer_for


def make_match(sport: str = "football", **fields: Any) -> dict[str, Any]:
    match = {
        "sportType": sport,
        "teams": ["a", "b"],
        "participants": [
            {"entityId": "a", "name": "A", "scoreData": {}, "isWinner": False},
            {"entityId": "b", "name": "B", "scoreData": {}, "isWinner": False},
        ],
        "status": "scheduled",
        "winnerId": None,
    }
    match.update(fields)
    return match


class ApplyResultTestCase(unittest.TestCase):
    """Test case for turning score payloads into match fields."""

    def test_football_draw_has_no_winner(self) -> None:
        """2-2 is a draw: no winner and both flags false."""
        result = apply_result(make_match(), {"finalScoreA": 2, "finalScoreB": 2})
        self.assertIsNone(result["winnerId"])
        self.assertEqual([p["isWinner"] for p in result["participants"]], [False, False])
        self.assertEqual(result["scores"], {"teamA": 2, "teamB": 2})
        self.assertEqual(result["participants"][0]["scoreData"], {"finalScore": 2})

    def test_football_win(self) -> None:
        result = apply_result(make_match(), {"scoreA": "1", "scoreB": 3})
        self.assertEqual(result["winnerId"], "b")
        self.assertEqual([p["isWinner"] for p in result["participants"]], [False, True])

    def test_scoring_is_idempotent(self) -> None:
        """Applying the same payload again gives the same fields."""
        match = make_match()
        payload = {"finalScoreA": 3, "finalScoreB": 1}
        first = apply_result(match, payload)
        second = apply_result({**match, **first}, payload)
        self.assertEqual(first, second)

    def test_rescoring_overwrites_previous_flags(self) -> None:
        match = make_match()
        first = apply_result(match, {"finalScoreA": 3, "finalScoreB": 1})
        second = apply_result({**match, **first}, {"finalScoreA": 0, "finalScoreB": 1})
        self.assertEqual(second["winnerId"], "b")
        self.assertEqual([p["isWinner"] for p in second["participants"]], [False, True])

    def test_cricket_runs_decide(self) -> None:
        payload = {"runsA": 180, "wicketsA": 7, "runsB": 176, "wicketsB": 10}
        result = apply_result(make_match("cricket"), payload)
        self.assertEqual(result["winnerId"], "a")
        self.assertEqual(
            result["participants"][1]["scoreData"], {"runs": 176, "wickets": 10}
        )
        self.assertEqual(result["scores"], {"teamA": 180, "teamB": 176})

    def test_cricket_equal_runs_is_a_tie(self) -> None:
        result = apply_result(make_match("cricket"), {"runsA": 150, "runsB": 150})
        self.assertIsNone(result["winnerId"])

    def test_badminton_sets_decide(self) -> None:
        payload = {
            "setsWonA": 1,
            "setsWonB": 2,
            "setScoresA": [21, 18, 15],
            "setScoresB": [19, 21, 21],
        }
        result = apply_result(make_match("badminton"), payload)
        self.assertEqual(result["winnerId"], "b")
        self.assertEqual(
            result["participants"][0]["scoreData"],
            {"setsWon": 1, "setScores": [21, 18, 15]},
        )

    def test_unlisted_sport_uses_generic_score(self) -> None:
        result = apply_result(make_match("chess"), {"scoreA": 1, "scoreB": 0})
        self.assertEqual(result["winnerId"], "a")
        self.assertEqual(result["participants"][0]["scoreData"], {"score": 1})

    def test_live_score_names_no_winner(self) -> None:
        result = apply_result(
            make_match(), {"finalScoreA": 1, "finalScoreB": 0}, final=False
        )
        self.assertIsNone(result["winnerId"])
        self.assertEqual(result["scores"], {"teamA": 1, "teamB": 0})

    def test_requires_two_participants(self) -> None:
        match = make_match(participants=[{"entityId": "a", "name": "A"}])
        with self.assertRaises(InvalidMatchStructure):
            apply_result(match, {"finalScoreA": 1, "finalScoreB": 0})

    def test_rejects_negative_and_non_integer_values(self) -> None:
        for payload in (
            {"finalScoreA": -1, "finalScoreB": 0},
            {"finalScoreA": "two", "finalScoreB": 0},
            {"finalScoreA": 1.5, "finalScoreB": 0},
            {"finalScoreA": True, "finalScoreB": 0},
        ):
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError):
                    apply_result(make_match(), payload)

    def test_primary_metric_is_required(self) -> None:
        """A payload without the sport's scoring fields is not a 0-0 draw."""
        for sport, payload in (
            ("football", {}),
            ("football", {"finalScoreA": 2}),
            ("cricket", {"scoreA": 5, "scoreB": 2}),
            ("cricket", {"runsA": 120, "wicketsA": 4}),
            ("badminton", {"finalScoreA": 2, "finalScoreB": 1}),
            ("chess", {"scoreB": 1}),
        ):
            with self.subTest(sport=sport, payload=payload):
                with self.assertRaises(ValidationError):
                    apply_result(make_match(sport), payload)

    def test_secondary_fields_default_to_zero(self) -> None:
        result = apply_result(make_match("cricket"), {"runsA": 90, "runsB": 91})
        self.assertEqual(
            result["participants"][0]["scoreData"], {"runs": 90, "wickets": 0}
        )
        result = apply_result(make_match("badminton"), {"setsWonA": 2, "setsWonB": 0})
        self.assertEqual(
            result["participants"][1]["scoreData"], {"setsWon": 0, "setScores": []}
        )

    def test_scorer_lookup(self) -> None:
        self.assertIs(scorer_for("volleyball"), scorer_for("football"))
        self.assertIsNot(scorer_for("cricket"), scorer_for("football"))


class TieBreakTestCase(unittest.TestCase):
    """Test case for resolving drawn matches."""

    def test_names_winner_without_touching_scores(self) -> None:
        match = make_match(status="completed", scores={"teamA": 1, "teamB": 1})
        result = apply_tie_break(match, "b")
        self.assertEqual(result["winnerId"], "b")
        self.assertTrue(result["tieBreakOverride"])
        self.assertNotIn("scores", result)
        self.assertEqual([p["isWinner"] for p in result["participants"]], [False, True])

    def test_winner_must_be_a_participant(self) -> None:
        match = make_match(status="completed")
        with self.assertRaises(WinnerNotAParticipant):
            apply_tie_break(match, "zzz")

    def test_only_completed_draws(self) -> None:
        with self.assertRaises(StateConflictError):
            apply_tie_break(make_match(status="in-progress"), "a")
        with self.assertRaises(StateConflictError):
            apply_tie_break(make_match(status="completed", winnerId="a"), "b")


if __name__ == "__main__":
    unittest.main()
