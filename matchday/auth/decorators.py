"""Decorators for protecting API routes."""

from functools import wraps

from firebase_admin import auth
from flask import current_app, g, request

from matchday.core.constants import ROLE_SPECTATOR
from matchday.errors import AuthenticationError, AuthorizationError


def _bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def role_required(*roles):
    """Require a verified Firebase ID token, and one of ``roles`` if given.

    The caller's role is read from the token's ``role`` custom claim and
    the identity is stored on ``g.user``.

    Usage:
    @role_required("admin", "coordinator")
    def protected_view():
        ...
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            token = _bearer_token()
            if token is None:
                raise AuthenticationError("Missing bearer token.")
            try:
                decoded = auth.verify_id_token(token)
            except (ValueError, auth.InvalidIdTokenError, auth.CertificateFetchError) as e:
                current_app.logger.warning(f"Rejected identity token: {e}")
                raise AuthenticationError("Invalid or expired token.") from e

            g.user = {
                "uid": decoded["uid"],
                "email": decoded.get("email"),
                "role": decoded.get("role") or ROLE_SPECTATOR,
            }
            if roles and g.user["role"] not in roles:
                raise AuthorizationError(
                    f"This action requires one of the roles: {', '.join(roles)}."
                )
            return func(*args, **kwargs)

        return decorated_function

    return decorator
