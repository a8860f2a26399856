"""Routes for the tournament blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, g, jsonify, request

from matchday.auth.decorators import role_required
from matchday.core.constants import ROLE_ADMIN, ROLE_COORDINATOR
from matchday.errors import ValidationError
from matchday.utils import json_body, json_formdata, validate_form

from . import bp
from .forms import EndTournamentForm, TournamentForm
from .services import TournamentService


@bp.route("", methods=["GET"])
def list_tournaments() -> Any:
    """List tournaments, optionally filtered by sport and status."""
    tournaments = TournamentService.list_tournaments(
        sport=request.args.get("sport"), status=request.args.get("status")
    )
    return jsonify({"status": "success", "tournaments": tournaments})


@bp.route("", methods=["POST"])
@role_required(ROLE_ADMIN)
def create_tournament() -> Any:
    """Create a new tournament."""
    form = validate_form(TournamentForm(formdata=json_formdata()))
    tournament_id = TournamentService.create_tournament(
        form.to_payload(), g.user["uid"]
    )
    current_app.logger.info(f"Tournament {tournament_id} created")
    return (
        jsonify(
            {
                "status": "success",
                "message": "Tournament created successfully.",
                "tournament": TournamentService.get_tournament(tournament_id),
            }
        ),
        201,
    )


@bp.route("/<string:tournament_id>", methods=["GET"])
def view_tournament(tournament_id: str) -> Any:
    """View a single tournament."""
    tournament = TournamentService.get_tournament(tournament_id)
    return jsonify({"status": "success", "tournament": tournament})


@bp.route("/<string:tournament_id>/participants", methods=["POST"])
@role_required(ROLE_ADMIN)
def register_participants(tournament_id: str) -> Any:
    """Register the ordered participant slots."""
    entries = json_body().get("participants")
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ValidationError("'participants' must be a list of objects.")
    result = TournamentService.register_participants(tournament_id, entries)
    return jsonify({"status": "success", **result})


@bp.route("/<string:tournament_id>/schedule", methods=["POST"])
@role_required(ROLE_ADMIN, ROLE_COORDINATOR)
def generate_schedule(tournament_id: str) -> Any:
    """Generate the opening fixtures and start the tournament."""
    matches, message = TournamentService.generate_schedule(tournament_id)
    return jsonify({"status": "success", "message": message, "matches": matches}), 201


@bp.route("/<string:tournament_id>/next-round", methods=["POST"])
@role_required(ROLE_ADMIN, ROLE_COORDINATOR)
def next_round(tournament_id: str) -> Any:
    """Generate the next knockout round, or complete the tournament after the final."""
    result = TournamentService.advance_round(tournament_id)
    return jsonify({"status": "success", **result})


@bp.route("/<string:tournament_id>/end", methods=["POST"])
@role_required(ROLE_ADMIN)
def end_tournament(tournament_id: str) -> Any:
    """End a tournament and record its winner."""
    form = validate_form(EndTournamentForm(formdata=json_formdata()))
    winner = form.winner.data.strip()
    TournamentService.end_tournament(tournament_id, winner)
    return jsonify(
        {
            "status": "success",
            "message": f"Tournament ended. Winner: {winner}.",
            "winner": winner,
        }
    )


@bp.route("/<string:tournament_id>/standings", methods=["GET"])
def standings(tournament_id: str) -> Any:
    """Return the tournament leaderboard."""
    table = TournamentService.get_standings(tournament_id)
    return jsonify({"status": "success", **table})
