"""Service layer for tournament business logic."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore
from flask import current_app, has_app_context

from matchday.core.constants import (
    DEFAULT_VENUE,
    MATCHES_COLLECTION,
    TEAMS_COLLECTION,
    TOURNAMENTS_COLLECTION,
    Format,
    ParticipantsType,
    TournamentStatus,
)
from matchday.core.types import ParticipantRef
from matchday.errors import (
    AlreadyCompleted,
    InsufficientParticipants,
    NotAllReady,
    NotPending,
    NotSingleElimination,
    RoundNotComplete,
    ScheduleInvariantError,
    StateConflictError,
    TournamentNotFound,
    UnresolvedTies,
    ValidationError,
)

from .advancement import analyze_bracket, summarize_match
from .generator import MatchSkeleton, TournamentGenerator
from .models import RegistrationEntry, Tournament
from .registry import ParticipantRegistry
from .utils import fetch_tournament_matches, get_tournament_standings

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

logger = logging.getLogger(__name__)

# Firestore caps a single transaction at 500 writes; one is the status flip.
MAX_MATCHES_PER_WRITE = 499


def _default_venue() -> str:
    if has_app_context():
        return str(current_app.config.get("DEFAULT_VENUE") or DEFAULT_VENUE)
    return DEFAULT_VENUE


class TournamentService:
    """Handles business logic and data access for tournaments."""

    @staticmethod
    def _load(
        db: Client, tournament_id: str
    ) -> tuple[DocumentReference, dict[str, Any]]:
        ref = db.collection(TOURNAMENTS_COLLECTION).document(tournament_id)
        doc = cast("DocumentSnapshot", ref.get())
        if not doc.exists:
            raise TournamentNotFound()
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return ref, data

    @staticmethod
    def create_tournament(
        data: dict[str, Any], admin_uid: str, db: Client | None = None
    ) -> str:
        """Create a tournament and return its ID."""
        if db is None:
            db = firestore.client()

        venue_type = data.get("venueType") or "off"
        venues = [v for v in data.get("venues") or [] if v]
        if venue_type == "off":
            venues = []
        elif venue_type == "single":
            venues = venues[:1]

        is_team = data["participantsType"] == ParticipantsType.TEAM.value
        payload = {
            "name": data["name"],
            "sport": data["sport"],
            "format": data["format"],
            "participantsType": data["participantsType"],
            "maxParticipants": int(data["maxParticipants"]),
            "playersPerTeam": int(data["playersPerTeam"]) if is_team else None,
            "venueType": venue_type,
            "venues": venues,
            "startDate": data.get("startDate"),
            "endDate": data.get("endDate"),
            "adminId": admin_uid,
            "status": TournamentStatus.PENDING.value,
            "registeredParticipants": [],
            "winner": None,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        _, ref = db.collection(TOURNAMENTS_COLLECTION).add(payload)
        logger.info("Tournament %s created by %s", ref.id, admin_uid)
        return str(ref.id)

    @staticmethod
    def list_tournaments(
        sport: str | None = None,
        status: str | None = None,
        db: Client | None = None,
    ) -> list[dict[str, Any]]:
        """List tournaments, optionally filtered by sport and status."""
        if db is None:
            db = firestore.client()
        query: Any = db.collection(TOURNAMENTS_COLLECTION)
        if sport:
            query = query.where(filter=firestore.FieldFilter("sport", "==", sport))
        if status and status != "all":
            query = query.where(filter=firestore.FieldFilter("status", "==", status))

        results = []
        for doc in query.stream():
            data = doc.to_dict()
            if data:
                data["id"] = doc.id
                results.append(data)
        return results

    @staticmethod
    def get_tournament(tournament_id: str, db: Client | None = None) -> Tournament:
        """Fetch a single tournament."""
        if db is None:
            db = firestore.client()
        _, data = TournamentService._load(db, tournament_id)
        return cast(Tournament, data)

    @staticmethod
    def register_participants(
        tournament_id: str,
        entries: Sequence[RegistrationEntry],
        db: Client | None = None,
    ) -> dict[str, Any]:
        """Register the ordered participant slots of a tournament."""
        return ParticipantRegistry.register_participants(tournament_id, entries, db)

    @staticmethod
    def _check_teams_ready(db: Client, participants: Sequence[ParticipantRef]) -> None:
        not_ready = []
        for ref in participants:
            doc = cast(
                "DocumentSnapshot",
                db.collection(TEAMS_COLLECTION).document(ref["id"]).get(),
            )
            team = (doc.to_dict() or {}) if doc.exists else {}
            if not team.get("isReady"):
                not_ready.append(ref["name"])
        if not_ready:
            raise NotAllReady(
                "All teams must be ready before the schedule is generated. "
                f"Not ready: {', '.join(not_ready)}.",
                details={"notReady": not_ready},
            )

    @staticmethod
    def _match_documents(
        tournament: dict[str, Any], skeletons: Sequence[MatchSkeleton]
    ) -> list[dict[str, Any]]:
        if not skeletons:
            raise ScheduleInvariantError()
        if len(skeletons) > MAX_MATCHES_PER_WRITE:
            raise ValidationError(
                f"Cannot write {len(skeletons)} matches at once; "
                f"the limit is {MAX_MATCHES_PER_WRITE}."
            )

        venues = tournament.get("venues") or []
        venue = venues[0] if venues else _default_venue()
        generated_at = datetime.datetime.now(datetime.timezone.utc)
        participant_model = tournament.get("participantsType")

        documents = []
        for skeleton in skeletons:
            document = skeleton.to_dict()
            for slot in document["participants"]:
                slot["participantModel"] = participant_model
            document.update(
                {
                    "tournamentId": tournament["id"],
                    "sportType": tournament.get("sport"),
                    "venue": venue,
                    "scheduledTime": generated_at,
                    "createdAt": firestore.SERVER_TIMESTAMP,
                }
            )
            documents.append(document)
        return documents

    @staticmethod
    def _write_matches(
        db: Client,
        tournament_ref: DocumentReference,
        documents: list[dict[str, Any]],
        expected: dict[str, Any],
        updates: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Atomically check ``expected`` fields, write matches and apply ``updates``."""
        match_refs = [db.collection(MATCHES_COLLECTION).document() for _ in documents]
        transaction = db.transaction()

        @firestore.transactional
        def commit(transaction: Transaction) -> None:
            snapshot = tournament_ref.get(transaction=transaction)
            current = snapshot.to_dict() or {}
            if current.get("status") != expected["status"]:
                error = (
                    NotPending
                    if expected["status"] == TournamentStatus.PENDING.value
                    else StateConflictError
                )
                raise error(
                    f"Tournament is {current.get('status')}, "
                    f"expected {expected['status']}."
                )
            if "currentRound" in expected and int(
                current.get("currentRound") or 1
            ) != expected["currentRound"]:
                raise StateConflictError(
                    f"Round {expected['currentRound'] + 1} has already been generated."
                )
            for match_ref, document in zip(match_refs, documents):
                transaction.set(match_ref, document)
            transaction.update(tournament_ref, updates)

        commit(transaction)
        return [
            {**document, "id": match_ref.id}
            for match_ref, document in zip(match_refs, documents)
        ]

    @staticmethod
    def generate_schedule(
        tournament_id: str, db: Client | None = None
    ) -> tuple[list[dict[str, Any]], str]:
        """Create the opening fixtures and start the tournament."""
        if db is None:
            db = firestore.client()
        ref, tournament = TournamentService._load(db, tournament_id)

        status = tournament.get("status")
        if status != TournamentStatus.PENDING.value:
            raise NotPending(
                f"Cannot generate schedule. Tournament is {status}, not pending."
            )

        participants = tournament.get("registeredParticipants") or []
        max_participants = int(tournament.get("maxParticipants") or 0)
        required = max(max_participants, TournamentGenerator.MIN_PARTICIPANTS)
        if len(participants) < required:
            raise InsufficientParticipants(
                f"Only {len(participants)}/{max_participants} participants registered."
            )

        if tournament.get("participantsType") == ParticipantsType.TEAM.value:
            TournamentService._check_teams_ready(db, participants)

        skeletons = TournamentGenerator.generate(
            participants, tournament.get("format", "")
        )
        documents = TournamentService._match_documents(tournament, skeletons)
        matches = TournamentService._write_matches(
            db,
            ref,
            documents,
            expected={"status": TournamentStatus.PENDING.value},
            updates={
                "status": TournamentStatus.ONGOING.value,
                "currentRound": 1,
                "startedAt": firestore.SERVER_TIMESTAMP,
            },
        )

        logger.info(
            "Generated %d matches for tournament %s", len(matches), tournament_id
        )
        message = f"Schedule generated successfully. {len(matches)} matches created."
        return matches, message

    @staticmethod
    def _mark_completed(
        db: Client, ref: DocumentReference, winner_name: str
    ) -> None:
        transaction = db.transaction()

        @firestore.transactional
        def commit(transaction: Transaction) -> None:
            snapshot = ref.get(transaction=transaction)
            status = (snapshot.to_dict() or {}).get("status")
            if status == TournamentStatus.COMPLETED.value:
                raise AlreadyCompleted("Tournament is already completed.")
            if status != TournamentStatus.ONGOING.value:
                raise StateConflictError(
                    "A tournament must be started before it can be ended."
                )
            transaction.update(
                ref,
                {
                    "status": TournamentStatus.COMPLETED.value,
                    "winner": winner_name,
                    "completedAt": firestore.SERVER_TIMESTAMP,
                },
            )

        commit(transaction)

    @staticmethod
    def advance_round(tournament_id: str, db: Client | None = None) -> dict[str, Any]:
        """Promote winners of a finished knockout round, or crown the champion."""
        if db is None:
            db = firestore.client()
        ref, tournament = TournamentService._load(db, tournament_id)

        if tournament.get("format") != Format.SINGLE_ELIMINATION.value:
            raise NotSingleElimination(
                "Round advancement only applies to single-elimination tournaments."
            )
        status = tournament.get("status")
        if status == TournamentStatus.COMPLETED.value:
            raise AlreadyCompleted("Tournament is already completed.")
        if status != TournamentStatus.ONGOING.value:
            raise StateConflictError("The tournament has not started yet.")

        participants = tournament.get("registeredParticipants") or []
        state = analyze_bracket(participants, fetch_tournament_matches(db, tournament_id))

        if state.pending:
            raise RoundNotComplete(
                f"{state.round_label} is not complete: {len(state.pending)} "
                "match(es) still awaiting scores.",
                details={"matches": [summarize_match(m) for m in state.pending]},
            )
        if state.unresolved:
            logger.warning(
                "Advancement of tournament %s blocked by %d tie(s)",
                tournament_id,
                len(state.unresolved),
            )
            raise UnresolvedTies(
                f"{len(state.unresolved)} tied match(es) in {state.round_label} "
                "need a winner before the next round can be generated.",
                details={"matches": [summarize_match(m) for m in state.unresolved]},
            )

        champion = state.champion
        if champion is not None:
            TournamentService._mark_completed(db, ref, champion["name"])
            logger.info(
                "Tournament %s completed, winner %s", tournament_id, champion["name"]
            )
            return {
                "completed": True,
                "winner": champion["name"],
                "matches": [],
                "message": f"Tournament completed. Winner: {champion['name']}.",
            }

        next_round = state.round_number + 1
        skeletons = TournamentGenerator.generate_next_round(state.advancing, next_round)
        documents = TournamentService._match_documents(tournament, skeletons)
        matches = TournamentService._write_matches(
            db,
            ref,
            documents,
            expected={
                "status": TournamentStatus.ONGOING.value,
                "currentRound": state.round_number,
            },
            updates={"currentRound": next_round},
        )

        label = matches[0]["round"]
        logger.info(
            "Tournament %s advanced to %s (%d matches)",
            tournament_id,
            label,
            len(matches),
        )
        return {
            "completed": False,
            "winner": None,
            "matches": matches,
            "message": f"{label} generated. {len(matches)} matches created.",
        }

    @staticmethod
    def end_tournament(
        tournament_id: str, winner_name: str, db: Client | None = None
    ) -> None:
        """Finalize a tournament and record its winner."""
        if db is None:
            db = firestore.client()
        ref, tournament = TournamentService._load(db, tournament_id)
        if tournament.get("status") == TournamentStatus.COMPLETED.value:
            raise AlreadyCompleted("Tournament is already completed.")
        TournamentService._mark_completed(db, ref, winner_name)
        logger.info("Tournament %s ended, winner %s", tournament_id, winner_name)

    @staticmethod
    def get_standings(tournament_id: str, db: Client | None = None) -> dict[str, Any]:
        """Compute the leaderboard from the tournament's matches."""
        if db is None:
            db = firestore.client()
        _, tournament = TournamentService._load(db, tournament_id)
        return get_tournament_standings(db, tournament)
