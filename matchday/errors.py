"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base application error class."""

    code = "APP_ERROR"

    def __init__(self, message, status_code=400, details=None):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error into the API error envelope."""
        payload: dict[str, Any] = {
            "status": "error",
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    """Raised when user input fails validation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message="Validation failed.", details=None):
        """Initialize the error."""
        super().__init__(message, 400, details)


class DuplicateResourceError(AppError):
    """Raised when trying to create a resource that already exists."""

    code = "DUPLICATE_RESOURCE"

    def __init__(self, message="Resource already exists.", details=None):
        """Initialize the error."""
        super().__init__(message, 409, details)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    code = "NOT_FOUND"

    def __init__(self, message="Resource not found.", details=None):
        """Initialize the error."""
        super().__init__(message, 404, details)


class StateConflictError(AppError):
    """Raised when an operation is not allowed in the current state."""

    code = "STATE_CONFLICT"

    def __init__(self, message="Operation not allowed in the current state.", details=None):
        """Initialize the error."""
        super().__init__(message, 409, details)


class AuthenticationError(AppError):
    """Raised when a request carries no valid identity token."""

    code = "UNAUTHENTICATED"

    def __init__(self, message="Authentication required."):
        """Initialize the error."""
        super().__init__(message, 401)


class AuthorizationError(AppError):
    """Raised when the caller's role does not permit the operation."""

    code = "FORBIDDEN"

    def __init__(self, message="You are not authorized to perform this action."):
        """Initialize the error."""
        super().__init__(message, 403)


# Registry


class InvalidSlotCount(ValidationError):
    code = "INVALID_SLOT_COUNT"


class ManagerNotFound(NotFoundError):
    code = "MANAGER_NOT_FOUND"


class TeamConflict(DuplicateResourceError):
    code = "TEAM_CONFLICT"


class RosterIncomplete(ValidationError):
    code = "ROSTER_INCOMPLETE"


# Scheduling


class TournamentNotFound(NotFoundError):
    code = "TOURNAMENT_NOT_FOUND"

    def __init__(self, message="Tournament not found."):
        """Initialize the error."""
        super().__init__(message)


class NotPending(StateConflictError):
    code = "NOT_PENDING"


class InsufficientParticipants(ValidationError):
    code = "INSUFFICIENT_PARTICIPANTS"


class NotEnoughParticipants(ValidationError):
    code = "NOT_ENOUGH_PARTICIPANTS"


class NotAllReady(StateConflictError):
    code = "NOT_ALL_READY"


class UnsupportedFormat(ValidationError):
    code = "UNSUPPORTED_FORMAT"


class ScheduleInvariantError(AppError):
    """Raised when generation yields no matches for a schedulable roster."""

    code = "SCHEDULE_INVARIANT"

    def __init__(self, message="Schedule generation produced no matches."):
        """Initialize the error."""
        super().__init__(message, 500)


# Results


class MatchNotFound(NotFoundError):
    code = "MATCH_NOT_FOUND"

    def __init__(self, message="Match not found."):
        """Initialize the error."""
        super().__init__(message)


class InvalidMatchStructure(ValidationError):
    code = "INVALID_MATCH_STRUCTURE"

    def __init__(self, message="Invalid match structure for scoring logic."):
        """Initialize the error."""
        super().__init__(message)


class TournamentCompleted(StateConflictError):
    code = "TOURNAMENT_COMPLETED"


class WinnerNotAParticipant(ValidationError):
    code = "WINNER_NOT_A_PARTICIPANT"


# Advancement


class NotSingleElimination(ValidationError):
    code = "NOT_SINGLE_ELIMINATION"


class RoundNotComplete(StateConflictError):
    code = "ROUND_NOT_COMPLETE"


class UnresolvedTies(StateConflictError):
    code = "UNRESOLVED_TIES"


class AlreadyCompleted(StateConflictError):
    code = "ALREADY_COMPLETED"
