# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .extensions import db
from .models import User

USER_HEADER = "X-User-Id"


def require_user(f):
    """
    Resolve the acting user for write endpoints.

    Authentication is handled upstream; the caller passes the authenticated
    user's id in the X-User-Id header. Sets g.current_user.

    Returns 401 if:
    - The header is missing or not an integer
    - No user has that id
    - The user account is deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get(USER_HEADER)
        if not raw:
            return jsonify({"error": "Authentication required"}), 401

        try:
            user_id = int(raw)
        except ValueError:
            return jsonify({"error": "Invalid user id"}), 401

        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return jsonify({"error": "Unknown or inactive user"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
