# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service
from .services.session_service import UnauthenticatedError


def _is_authenticated() -> bool:
    return getattr(g, 'current_user', None) is not None


def current_user_id() -> int:
    """
    Id of the caller established by @require_auth.

    Raises UnauthenticatedError outside an authenticated request.
    """
    if not _is_authenticated():
        raise UnauthenticatedError()
    return g.current_user.id


def require_auth(f):
    """
    Require a valid bearer session token.

    Sets on Flask g:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()

        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context
        g.session_token = token

        return f(*args, **kwargs)

    return decorated_function
