"""Identity-token authentication for the API blueprints."""

from .decorators import role_required

__all__ = ["role_required"]
