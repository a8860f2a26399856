"""Routes for the teams blueprint."""

from flask import g, jsonify

from matchday.auth.decorators import role_required
from matchday.core.constants import ROLE_ADMIN, ROLE_MANAGER
from matchday.utils import json_formdata, validate_form

from . import bp
from .forms import ReadyForm, RosterPlayerForm
from .services import TeamService


@bp.route("/<string:team_id>/ready", methods=["PUT"])
@role_required(ROLE_MANAGER, ROLE_ADMIN)
def set_ready(team_id):
    """Mark a team ready or not ready."""
    form = validate_form(ReadyForm(formdata=json_formdata()))
    result = TeamService.set_ready(team_id, form.isReady.data, g.user)
    return jsonify({"status": "success", **result})


@bp.route("/<string:team_id>/players", methods=["POST"])
@role_required(ROLE_MANAGER)
def add_player(team_id):
    """Add a player to the team's roster."""
    form = validate_form(RosterPlayerForm(formdata=json_formdata()))
    player = TeamService.add_player(
        team_id,
        {
            "playerId": form.playerId.data,
            "name": form.name.data,
            "contactInfo": form.contactInfo.data,
            "isCaptain": form.isCaptain.data,
        },
        g.user,
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": f"Player {player.get('name')} added to the roster.",
                "player": player,
            }
        ),
        201,
    )


@bp.route("/<string:team_id>/players/<string:player_id>", methods=["DELETE"])
@role_required(ROLE_MANAGER)
def remove_player(team_id, player_id):
    """Remove a player from the team's roster."""
    TeamService.remove_player(team_id, player_id, g.user)
    return jsonify({"status": "success", "message": "Player removed from the roster."})
