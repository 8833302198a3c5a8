from functools import wraps
from typing import Callable

from flask import jsonify, session


def check_auth() -> bool:
    """Whether the session has logged in through `/auth/login`."""
    return session.get("authenticated") is True


def require_auth(view: Callable) -> Callable:
    """
    Guards a JSON endpoint of the media server.

    Sessions that have not logged in get a 401 with {"error": "authentication required"}
    instead of a redirect, since every client of these routes is an API caller.

    Args:
        view: The route function to guard.

    Returns:
        function: The guarded route function.
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not check_auth():
            return jsonify({"error": "authentication required"}), 401
        return view(*args, **kwargs)
    return wrapper
