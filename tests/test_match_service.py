"""Tests for MatchService."""

from __future__ import annotations

import datetime
import unittest

from matchday.errors import (
    InvalidMatchStructure,
    MatchNotFound,
    StateConflictError,
    TournamentCompleted,
    ValidationError,
)
from matchday.match.services import MatchService
from tests.conftest import FirestoreTestCase

COORDINATOR = {"uid": "coord1", "role": "coordinator"}


class MatchServiceTestCase(FirestoreTestCase):
    """Test case for score submission and status maintenance."""

    def setUp(self) -> None:
        super().setUp()
        self.add_tournament(status="ongoing")
        self.db.collection("matches").document("m1").set(
            {
                "tournamentId": "t1",
                "sportType": "football",
                "teams": ["a", "b"],
                "participants": [
                    {"entityId": "a", "name": "A", "scoreData": {}, "isWinner": False},
                    {"entityId": "b", "name": "B", "scoreData": {}, "isWinner": False},
                ],
                "status": "scheduled",
                "scores": None,
                "winnerId": None,
                "round": "Round 1",
                "roundNumber": 1,
                "matchNumber": 1,
            }
        )

    def stored(self) -> dict:
        return self.db.collection("matches").document("m1").get().to_dict()

    def test_submit_final_score(self) -> None:
        MatchService.submit_score(
            "m1", {"finalScoreA": 3, "finalScoreB": 1}, COORDINATOR, db=self.db
        )
        match = self.stored()
        self.assertEqual(match["status"], "completed")
        self.assertEqual(match["winnerId"], "a")
        self.assertEqual(match["scores"], {"teamA": 3, "teamB": 1})
        self.assertEqual(match["coordinatorId"], "coord1")
        self.assertEqual(
            [p["isWinner"] for p in match["participants"]], [True, False]
        )

    def test_submit_live_score(self) -> None:
        MatchService.submit_score(
            "m1",
            {"finalScoreA": 1, "finalScoreB": 0, "status": "in-progress"},
            COORDINATOR,
            db=self.db,
        )
        match = self.stored()
        self.assertEqual(match["status"], "in-progress")
        self.assertIsNone(match["winnerId"])

    def test_scoring_status_must_be_live_or_final(self) -> None:
        with self.assertRaises(ValidationError):
            MatchService.submit_score(
                "m1", {"status": "cancelled"}, COORDINATOR, db=self.db
            )

    def test_missing_match(self) -> None:
        with self.assertRaises(MatchNotFound):
            MatchService.submit_score("nope", {}, COORDINATOR, db=self.db)

    def test_completed_tournament_is_frozen(self) -> None:
        self.db.collection("tournaments").document("t1").update(
            {"status": "completed"}
        )
        with self.assertRaises(TournamentCompleted):
            MatchService.submit_score(
                "m1", {"finalScoreA": 1, "finalScoreB": 0}, COORDINATOR, db=self.db
            )

    def test_cancelled_match_cannot_be_scored(self) -> None:
        MatchService.update_status("m1", {"status": "cancelled"}, COORDINATOR, db=self.db)
        with self.assertRaises(StateConflictError):
            MatchService.submit_score(
                "m1", {"finalScoreA": 1, "finalScoreB": 0}, COORDINATOR, db=self.db
            )

    def test_malformed_match(self) -> None:
        self.db.collection("matches").document("m1").update(
            {"participants": [{"entityId": "a", "name": "A"}]}
        )
        with self.assertRaises(InvalidMatchStructure):
            MatchService.submit_score(
                "m1", {"finalScoreA": 1, "finalScoreB": 0}, COORDINATOR, db=self.db
            )

    def test_resolve_tie(self) -> None:
        MatchService.submit_score(
            "m1", {"finalScoreA": 2, "finalScoreB": 2}, COORDINATOR, db=self.db
        )
        MatchService.resolve_tie("m1", "b", COORDINATOR, db=self.db)
        match = self.stored()
        self.assertEqual(match["winnerId"], "b")
        self.assertTrue(match["tieBreakOverride"])
        self.assertEqual(match["scores"], {"teamA": 2, "teamB": 2})

    def test_reschedule(self) -> None:
        when = datetime.datetime(2024, 5, 1, 15, 30)
        MatchService.update_status(
            "m1",
            {"status": "rescheduled", "scheduledTime": when, "venue": "Field 2"},
            COORDINATOR,
            db=self.db,
        )
        match = self.stored()
        self.assertEqual(match["status"], "rescheduled")
        self.assertEqual(match["scheduledTime"], when)
        self.assertEqual(match["venue"], "Field 2")

    def test_completed_match_cannot_move(self) -> None:
        MatchService.submit_score(
            "m1", {"finalScoreA": 1, "finalScoreB": 0}, COORDINATOR, db=self.db
        )
        with self.assertRaises(StateConflictError):
            MatchService.update_status(
                "m1", {"status": "scheduled"}, COORDINATOR, db=self.db
            )

    def test_status_cannot_be_set_to_completed(self) -> None:
        with self.assertRaises(ValidationError):
            MatchService.update_status(
                "m1", {"status": "completed"}, COORDINATOR, db=self.db
            )

    def test_list_matches_in_round_order(self) -> None:
        self.db.collection("matches").document("m0").set(
            {"tournamentId": "t1", "roundNumber": 1, "matchNumber": 0}
        )
        self.db.collection("matches").document("m2").set(
            {"tournamentId": "t1", "roundNumber": 2, "matchNumber": 1}
        )
        matches = MatchService.list_matches("t1", db=self.db)
        self.assertEqual([m["id"] for m in matches], ["m0", "m1", "m2"])


if __name__ == "__main__":
    unittest.main()
