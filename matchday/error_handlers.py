"""JSON error handlers for the application."""

from flask import Blueprint, current_app, jsonify

from .errors import AppError, NotFoundError, StateConflictError, ValidationError

error_handlers_bp = Blueprint("error_handlers", __name__)


def _error_response(code, message, status_code, details=None):
    payload = {"status": "error", "code": code, "message": message}
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status_code


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors."""
    current_app.logger.warning(f"Validation Error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(StateConflictError)
def handle_state_conflict_error(error):
    """Handles operations attempted in the wrong lifecycle state."""
    current_app.logger.warning(f"State Conflict: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    if error.status_code >= 500:
        current_app.logger.error(f"Application Error: {error.message}")
    else:
        current_app.logger.warning(f"Application Error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    return _error_response("NOT_FOUND", "The requested URL was not found.", 404)


@error_handlers_bp.app_errorhandler(405)
def handle_405(e):
    """Handles requests with an unsupported method."""
    return _error_response("METHOD_NOT_ALLOWED", "Method not allowed.", 405)


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return _error_response("INTERNAL_ERROR", "An unexpected error occurred.", 500)
