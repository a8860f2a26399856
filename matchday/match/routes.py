"""Routes for the match blueprint."""

from flask import g, jsonify

from matchday.auth.decorators import role_required
from matchday.core.constants import ROLE_ADMIN, ROLE_COORDINATOR
from matchday.utils import json_body, json_formdata, validate_form

from . import bp
from .forms import MatchStatusForm, TieResolutionForm
from .services import MatchService


@bp.route("/tournament/<string:tournament_id>", methods=["GET"])
def list_matches(tournament_id):
    """List a tournament's matches in round order."""
    matches = MatchService.list_matches(tournament_id)
    return jsonify({"status": "success", "matches": matches})


@bp.route("/<string:match_id>/score", methods=["PUT"])
@role_required(ROLE_ADMIN, ROLE_COORDINATOR)
def submit_score(match_id):
    """Record a match score."""
    match = MatchService.submit_score(match_id, json_body(), g.user)
    return jsonify(
        {"status": "success", "message": "Score updated successfully.", "match": match}
    )


@bp.route("/<string:match_id>/winner", methods=["PUT"])
@role_required(ROLE_ADMIN, ROLE_COORDINATOR)
def resolve_tie(match_id):
    """Name the winner of a drawn match."""
    form = validate_form(TieResolutionForm(formdata=json_formdata()))
    match = MatchService.resolve_tie(match_id, form.winnerId.data, g.user)
    return jsonify({"status": "success", "message": "Tie resolved.", "match": match})


@bp.route("/<string:match_id>/status", methods=["PUT"])
@role_required(ROLE_ADMIN, ROLE_COORDINATOR)
def update_status(match_id):
    """Start, reschedule or cancel a match."""
    form = validate_form(MatchStatusForm(formdata=json_formdata()))
    match = MatchService.update_status(
        match_id,
        {
            "status": form.status.data,
            "scheduledTime": form.scheduledTime.data,
            "venue": form.venue.data,
        },
        g.user,
    )
    return jsonify(
        {"status": "success", "message": "Match status updated.", "match": match}
    )
