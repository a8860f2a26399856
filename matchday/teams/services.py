"""Service layer for team-related operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, cast

from firebase_admin import firestore

from matchday.core.constants import (
    PLAYERS_COLLECTION,
    ROLE_ADMIN,
    ROLE_MANAGER,
    TEAMS_COLLECTION,
    TOURNAMENTS_COLLECTION,
    USERS_COLLECTION,
)
from matchday.errors import (
    AuthorizationError,
    NotFoundError,
    RosterIncomplete,
    TeamConflict,
    ValidationError,
)

from .models import Player, Team

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference

logger = logging.getLogger(__name__)


def _first(query: Any) -> Optional[DocumentSnapshot]:
    """Return the first snapshot a query yields, if any."""
    for doc in query.limit(1).stream():
        return cast("DocumentSnapshot", doc)
    return None


class TeamService:
    """Service class for team-related operations."""

    @staticmethod
    def get_team(db: Client, team_id: str) -> tuple[DocumentReference, Team]:
        """Load a team document or raise NotFoundError."""
        ref = db.collection(TEAMS_COLLECTION).document(team_id)
        doc = cast("DocumentSnapshot", ref.get())
        if not doc.exists:
            raise NotFoundError(f"Team with ID {team_id} not found.")
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return ref, cast(Team, data)

    @staticmethod
    def find_manager(db: Client, unique_id: str) -> Optional[dict[str, Any]]:
        """Look up a manager user by the uniqueId handed out at sign-up."""
        query = (
            db.collection(USERS_COLLECTION)
            .where(filter=firestore.FieldFilter("uniqueId", "==", unique_id))
            .where(filter=firestore.FieldFilter("role", "==", ROLE_MANAGER))
        )
        doc = _first(query)
        if doc is None:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    @staticmethod
    def find_team_by_name(db: Client, name: str) -> Optional[dict[str, Any]]:
        """Return the team called ``name``, if one exists."""
        query = db.collection(TEAMS_COLLECTION).where(
            filter=firestore.FieldFilter("name", "==", name)
        )
        doc = _first(query)
        if doc is None:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    @staticmethod
    def find_managed_team(
        db: Client, manager_id: str, tournament_id: str
    ) -> Optional[dict[str, Any]]:
        """Return the team ``manager_id`` already runs in ``tournament_id``."""
        query = db.collection(TEAMS_COLLECTION).where(
            filter=firestore.FieldFilter("managerId", "==", manager_id)
        )
        for doc in query.stream():
            data = doc.to_dict() or {}
            if tournament_id in (data.get("tournamentIds") or []):
                data["id"] = doc.id
                return data
        return None

    @staticmethod
    def _required_roster_size(db: Client, team: Team) -> int:
        """Largest playersPerTeam among the team's tournaments."""
        sizes = [0]
        for tournament_id in team.get("tournamentIds") or []:
            doc = cast(
                "DocumentSnapshot",
                db.collection(TOURNAMENTS_COLLECTION).document(tournament_id).get(),
            )
            if doc.exists:
                sizes.append(int((doc.to_dict() or {}).get("playersPerTeam") or 0))
        return max(sizes)

    @staticmethod
    def _check_manager(team: Team, user: dict[str, Any], allow_admin: bool) -> None:
        if team.get("managerId") == user.get("uid"):
            return
        if allow_admin and user.get("role") == ROLE_ADMIN:
            return
        raise AuthorizationError(
            "Only the team manager can change this team."
            if not allow_admin
            else "Only the team manager or an admin can change this status."
        )

    @staticmethod
    def set_ready(
        team_id: str,
        is_ready: bool,
        user: dict[str, Any],
        db: Client | None = None,
    ) -> dict[str, Any]:
        """Mark a team ready (or not) to start its tournament."""
        if db is None:
            db = firestore.client()
        ref, team = TeamService.get_team(db, team_id)
        TeamService._check_manager(team, user, allow_admin=True)

        tournament_ids = team.get("tournamentIds") or []
        if not tournament_ids:
            raise ValidationError("Team is not registered for an active tournament.")

        if is_ready:
            tournament_doc = cast(
                "DocumentSnapshot",
                db.collection(TOURNAMENTS_COLLECTION).document(tournament_ids[0]).get(),
            )
            tournament = tournament_doc.to_dict() or {}
            required = int(tournament.get("playersPerTeam") or 0)
            roster_size = len(team.get("roster") or [])
            if roster_size < required:
                raise RosterIncomplete(
                    f"Roster is incomplete ({roster_size}/{required}). "
                    "Cannot set status to Ready."
                )

        ref.update({"isReady": is_ready})
        logger.info("Team %s ready=%s", team_id, is_ready)
        return {
            "message": f"Team {team.get('name')} status updated to "
            f"{'Ready' if is_ready else 'Not Ready'}.",
            "isReady": is_ready,
        }

    @staticmethod
    def add_player(
        team_id: str,
        data: dict[str, Any],
        user: dict[str, Any],
        db: Client | None = None,
    ) -> Player:
        """Add a new or unattached player to the manager's roster."""
        if db is None:
            db = firestore.client()
        team_ref, team = TeamService.get_team(db, team_id)
        TeamService._check_manager(team, user, allow_admin=False)

        roster = team.get("roster") or []
        max_players = TeamService._required_roster_size(db, team)
        if max_players > 0 and len(roster) >= max_players:
            raise ValidationError(
                "Roster is full. Max players allowed across your registered "
                f"tournaments is {max_players}."
            )

        players = db.collection(PLAYERS_COLLECTION)
        player_id = data.get("playerId")
        if player_id:
            player_ref = players.document(player_id)
            player_doc = cast("DocumentSnapshot", player_ref.get())
            if not player_doc.exists:
                raise NotFoundError("Player not found.")
            player = cast(Player, player_doc.to_dict() or {})
            if player.get("teamId") and player["teamId"] != team_id:
                raise TeamConflict(
                    f"Player '{player.get('name')}' is already on another team's roster."
                )
            if any(entry.get("playerId") == player_id for entry in roster):
                raise TeamConflict(
                    f"Player '{player.get('name')}' is already on this roster."
                )
        else:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("Player name is required.")
            player_ref = players.document()
            player = cast(
                Player,
                {
                    "name": name,
                    "contactInfo": data.get("contactInfo") or "",
                    "createdAt": firestore.SERVER_TIMESTAMP,
                },
            )

        player["teamId"] = team_id
        batch = db.batch()
        batch.set(player_ref, player, merge=True)
        batch.update(
            team_ref,
            {
                "roster": firestore.ArrayUnion(
                    [{"playerId": player_ref.id, "isCaptain": bool(data.get("isCaptain"))}]
                )
            },
        )
        batch.commit()

        player["id"] = player_ref.id
        return player

    @staticmethod
    def remove_player(
        team_id: str,
        player_id: str,
        user: dict[str, Any],
        db: Client | None = None,
    ) -> None:
        """Take a player off the manager's roster and delete the player."""
        if db is None:
            db = firestore.client()
        team_ref, team = TeamService.get_team(db, team_id)
        TeamService._check_manager(team, user, allow_admin=False)

        roster = team.get("roster") or []
        remaining = [entry for entry in roster if entry.get("playerId") != player_id]
        if len(remaining) == len(roster):
            raise NotFoundError("Player not found on this roster.")

        batch = db.batch()
        batch.update(team_ref, {"roster": remaining})
        batch.delete(db.collection(PLAYERS_COLLECTION).document(player_id))
        batch.commit()
