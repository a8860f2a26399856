"""Service layer for match data access and orchestration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from matchday.core.constants import (
    MATCHES_COLLECTION,
    TOURNAMENTS_COLLECTION,
    Format,
    MatchStatus,
    TournamentStatus,
)
from matchday.errors import (
    MatchNotFound,
    StateConflictError,
    TournamentCompleted,
    ValidationError,
)
from matchday.tournament.utils import fetch_tournament_matches

from .models import STATUS_TRANSITIONS, Match
from .scoring import apply_result, apply_tie_break

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference

logger = logging.getLogger(__name__)

SCORABLE_STATUSES = (MatchStatus.IN_PROGRESS.value, MatchStatus.COMPLETED.value)


class MatchService:
    """Service class for match-related operations."""

    @staticmethod
    def get_match(db: Client, match_id: str) -> tuple[DocumentReference, Match]:
        """Load a match document or raise MatchNotFound."""
        ref = db.collection(MATCHES_COLLECTION).document(match_id)
        doc = cast("DocumentSnapshot", ref.get())
        if not doc.exists:
            raise MatchNotFound()
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return ref, cast(Match, data)

    @staticmethod
    def _ensure_tournament_open(db: Client, match: dict[str, Any]) -> None:
        """Refuse changes in a completed tournament or an advanced knockout round."""
        tournament_id = match.get("tournamentId")
        if not tournament_id:
            return
        doc = cast(
            "DocumentSnapshot",
            db.collection(TOURNAMENTS_COLLECTION).document(tournament_id).get(),
        )
        tournament = (doc.to_dict() or {}) if doc.exists else {}
        if tournament.get("status") == TournamentStatus.COMPLETED.value:
            raise TournamentCompleted(
                "Cannot update scores for a completed tournament."
            )

        if tournament.get("format") != Format.SINGLE_ELIMINATION.value:
            return
        round_number = int(match.get("roundNumber") or 1)
        if round_number < int(tournament.get("currentRound") or 1):
            raise StateConflictError(
                f"Round {round_number} has already been advanced; "
                "its matches can no longer change."
            )

    @staticmethod
    def list_matches(tournament_id: str, db: Client | None = None) -> list[dict[str, Any]]:
        """Return a tournament's matches ordered by round and match number."""
        if db is None:
            db = firestore.client()
        matches = fetch_tournament_matches(db, tournament_id)
        matches.sort(
            key=lambda m: (m.get("roundNumber") or 0, m.get("matchNumber") or 0)
        )
        return matches

    @staticmethod
    def submit_score(
        match_id: str,
        payload: dict[str, Any],
        user: dict[str, Any],
        db: Client | None = None,
    ) -> dict[str, Any]:
        """Record a live or final score and recompute the winner."""
        if db is None:
            db = firestore.client()
        ref, match = MatchService.get_match(db, match_id)
        MatchService._ensure_tournament_open(db, match)

        if match.get("status") == MatchStatus.CANCELLED.value:
            raise StateConflictError("A cancelled match cannot be scored.")

        status = payload.get("status") or MatchStatus.COMPLETED.value
        if status not in SCORABLE_STATUSES:
            raise ValidationError(
                f"Status must be one of {', '.join(SCORABLE_STATUSES)} when scoring."
            )

        updates = apply_result(
            match, payload, final=status == MatchStatus.COMPLETED.value
        )
        updates.update(
            {
                "status": status,
                "coordinatorId": user.get("uid"),
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        ref.update(updates)

        if status == MatchStatus.COMPLETED.value and updates["winnerId"] is None:
            logger.info("Match %s completed as a draw", match_id)
        else:
            logger.info("Match %s scored (%s)", match_id, status)
        return {**match, **updates}

    @staticmethod
    def resolve_tie(
        match_id: str,
        winner_id: str,
        user: dict[str, Any],
        db: Client | None = None,
    ) -> dict[str, Any]:
        """Name the winner of a drawn match; scores stay as recorded."""
        if db is None:
            db = firestore.client()
        ref, match = MatchService.get_match(db, match_id)
        MatchService._ensure_tournament_open(db, match)

        updates = apply_tie_break(match, winner_id)
        updates.update(
            {
                "coordinatorId": user.get("uid"),
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        ref.update(updates)
        logger.info("Tie in match %s resolved in favour of %s", match_id, winner_id)
        return {**match, **updates}

    @staticmethod
    def update_status(
        match_id: str,
        data: dict[str, Any],
        user: dict[str, Any],
        db: Client | None = None,
    ) -> dict[str, Any]:
        """Move a match between its non-final statuses."""
        if db is None:
            db = firestore.client()
        ref, match = MatchService.get_match(db, match_id)
        MatchService._ensure_tournament_open(db, match)

        current = match.get("status") or MatchStatus.SCHEDULED.value
        target = data.get("status")
        if target == MatchStatus.COMPLETED.value:
            raise ValidationError("Submit a score to complete a match.")
        if target not in STATUS_TRANSITIONS:
            raise ValidationError(f"Unknown match status '{target}'.")
        allowed = STATUS_TRANSITIONS.get(current, frozenset())
        if target != current and target not in allowed:
            logger.warning(
                "Rejected status change of match %s: %s -> %s",
                match_id,
                current,
                target,
            )
            raise StateConflictError(
                f"Cannot change match status from {current} to {target}."
            )

        updates: dict[str, Any] = {
            "status": target,
            "coordinatorId": user.get("uid"),
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }
        if data.get("scheduledTime"):
            updates["scheduledTime"] = data["scheduledTime"]
        if data.get("venue"):
            updates["venue"] = data["venue"]

        ref.update(updates)
        return {**match, **updates}
