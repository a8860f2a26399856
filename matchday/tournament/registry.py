"""Participant registration for tournaments."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from matchday.core.constants import (
    PLAYERS_COLLECTION,
    TEAMS_COLLECTION,
    TOURNAMENTS_COLLECTION,
    ParticipantsType,
    TournamentStatus,
)
from matchday.core.types import ParticipantRef
from matchday.errors import (
    InvalidSlotCount,
    ManagerNotFound,
    NotPending,
    TeamConflict,
    TournamentNotFound,
    ValidationError,
)
from matchday.teams.services import TeamService

from .models import RegistrationEntry

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.batch import WriteBatch
    from google.cloud.firestore_v1.client import Client

logger = logging.getLogger(__name__)


class ParticipantRegistry:
    """Resolves registration slots into Teams or Players, in order."""

    @staticmethod
    def _team_name(entry: RegistrationEntry) -> str:
        name = (entry.get("teamName") or entry.get("name") or "").strip()
        if not name:
            raise ValidationError("Every team slot needs a team name.")
        return name

    @staticmethod
    def _resolve_managers(
        db: Client, entries: Sequence[RegistrationEntry]
    ) -> list[dict[str, Any]]:
        managers = []
        for entry in entries:
            unique_id = entry.get("managerId")
            manager = TeamService.find_manager(db, unique_id) if unique_id else None
            if manager is None:
                raise ManagerNotFound(
                    f"Manager ID {unique_id} not found or is not a Manager."
                )
            managers.append(manager)

        seen = set()
        for manager in managers:
            if manager["id"] in seen:
                raise TeamConflict(
                    "A single manager cannot manage more than one team in the "
                    "same tournament."
                )
            seen.add(manager["id"])
        return managers

    @staticmethod
    def _resolve_team(
        db: Client,
        batch: WriteBatch,
        tournament_id: str,
        entry: RegistrationEntry,
        manager: dict[str, Any],
    ) -> ParticipantRef:
        teams = db.collection(TEAMS_COLLECTION)
        name = ParticipantRegistry._team_name(entry)
        manager_id = manager["id"]
        manager_label = manager.get("uniqueId", manager_id)
        managed = TeamService.find_managed_team(db, manager_id, tournament_id)

        team_id = entry.get("teamId")
        if team_id:
            ref, team = TeamService.get_team(db, team_id)
            if managed and managed["id"] != team_id:
                raise TeamConflict(
                    f"Manager '{manager_label}' already manages team "
                    f"'{managed.get('name')}' in this tournament."
                )
            batch.update(
                ref,
                {
                    "name": name,
                    "managerId": manager_id,
                    "tournamentIds": firestore.ArrayUnion([tournament_id]),
                },
            )
            return {"id": team_id, "name": name}

        if managed and managed.get("name") != name:
            raise TeamConflict(
                f"Manager '{manager_label}' already manages team "
                f"'{managed.get('name')}' in this tournament."
            )

        existing = managed or TeamService.find_team_by_name(db, name)
        if existing:
            if existing.get("managerId") != manager_id:
                raise TeamConflict(
                    f"Team name '{name}' is already registered to a different manager."
                )
            batch.update(
                teams.document(existing["id"]),
                {"tournamentIds": firestore.ArrayUnion([tournament_id])},
            )
            return {"id": existing["id"], "name": name}

        ref = teams.document()
        batch.set(
            ref,
            {
                "name": name,
                "managerId": manager_id,
                "roster": [],
                "isReady": False,
                "tournamentIds": [tournament_id],
                "createdAt": firestore.SERVER_TIMESTAMP,
            },
        )
        return {"id": ref.id, "name": name}

    @staticmethod
    def _register_teams(
        db: Client,
        batch: WriteBatch,
        tournament_id: str,
        entries: Sequence[RegistrationEntry],
    ) -> list[ParticipantRef]:
        seen = set()
        for entry in entries:
            name = ParticipantRegistry._team_name(entry)
            if name.lower() in seen:
                raise TeamConflict(
                    f"Team name '{name}' appears more than once in this registration."
                )
            seen.add(name.lower())

        managers = ParticipantRegistry._resolve_managers(db, entries)
        return [
            ParticipantRegistry._resolve_team(db, batch, tournament_id, entry, manager)
            for entry, manager in zip(entries, managers)
        ]

    @staticmethod
    def _register_players(
        db: Client, batch: WriteBatch, entries: Sequence[RegistrationEntry]
    ) -> list[ParticipantRef]:
        players = db.collection(PLAYERS_COLLECTION)
        refs: list[ParticipantRef] = []
        seen = set()
        for entry in entries:
            name = (entry.get("name") or "").strip()
            if not name:
                raise ValidationError("Every player slot needs a name.")
            if name.lower() in seen:
                raise ValidationError(f"Player '{name}' is listed more than once.")
            seen.add(name.lower())

            docs = list(
                players.where(filter=firestore.FieldFilter("name", "==", name))
                .limit(1)
                .stream()
            )
            if docs:
                refs.append({"id": docs[0].id, "name": name})
                continue

            ref = players.document()
            batch.set(
                ref,
                {
                    "name": name,
                    "contactInfo": entry.get("contactInfo") or "",
                    "createdAt": firestore.SERVER_TIMESTAMP,
                },
            )
            refs.append({"id": ref.id, "name": name})
        return refs

    @staticmethod
    def register_participants(
        tournament_id: str,
        entries: Sequence[RegistrationEntry],
        db: Client | None = None,
    ) -> dict[str, Any]:
        """Register exactly ``maxParticipants`` slots, in seeding order."""
        if db is None:
            db = firestore.client()
        tournament_ref = db.collection(TOURNAMENTS_COLLECTION).document(tournament_id)
        doc = cast("DocumentSnapshot", tournament_ref.get())
        if not doc.exists:
            raise TournamentNotFound()
        tournament = doc.to_dict() or {}

        if tournament.get("status") != TournamentStatus.PENDING.value:
            raise NotPending("Registration is closed once the tournament has started.")

        max_participants = int(tournament.get("maxParticipants") or 0)
        if len(entries) != max_participants:
            raise InvalidSlotCount(
                f"Invalid slot count. Must register exactly {max_participants} slots "
                f"(got {len(entries)})."
            )

        participants_type = tournament.get("participantsType")
        batch = db.batch()
        if participants_type == ParticipantsType.TEAM.value:
            refs = ParticipantRegistry._register_teams(db, batch, tournament_id, entries)
            previous = {p["id"] for p in tournament.get("registeredParticipants") or []}
            for dropped in previous - {ref["id"] for ref in refs}:
                batch.update(
                    db.collection(TEAMS_COLLECTION).document(dropped),
                    {"tournamentIds": firestore.ArrayRemove([tournament_id])},
                )
        else:
            refs = ParticipantRegistry._register_players(db, batch, entries)

        batch.update(tournament_ref, {"registeredParticipants": refs})
        batch.commit()

        logger.info(
            "Registered %d %s slots for tournament %s",
            len(refs),
            participants_type,
            tournament_id,
        )
        return {
            "message": f"All {len(refs)} {participants_type} successfully registered.",
            "count": len(refs),
            "participants": refs,
        }
