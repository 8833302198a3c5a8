import hmac

from flask import Blueprint, Response, current_app, jsonify, request, session
from flask_limiter import Limiter

from common.logging import Logger, NullLogger


def create_authentication_blueprint(limiter: Limiter, logger: Logger | None = None) -> Blueprint:
    """
    Creates and configures the Flask blueprint for logging in and out.

    A successful login sets the session flag that `auth.check_auth` looks for. Login
    attempts are rate limited.

    Args:
        limiter (Limiter): The Flask-Limiter instance for rate limiting login attempts.
        logger (Logger | None): Optional logger for authentication events. Uses NullLogger if not provided.

    Returns:
        Blueprint: The configured Flask blueprint for authentication.
    """

    authenticator = Blueprint("authenticator", __name__)

    logger: Logger = logger or NullLogger()

    @authenticator.route("/login", methods=["POST"])
    @limiter.limit("5 per minute")
    def login() -> tuple[Response, int]:
        """
        Authenticates the session if the submitted password matches the configured one.

        Returns:
            tuple[Response, int]: {"authenticated": bool} with 200 on success, 401 on failure.
        """
        password = request.form.get("password", "")
        expected = current_app.config["PASSWORD"]
        if hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
            session["authenticated"] = True
            logger.info(f"Login from {request.remote_addr} successful")
            return jsonify({"authenticated": True}), 200

        logger.warning(f"Login from {request.remote_addr} unsuccessful")
        return jsonify({"authenticated": False}), 401

    @authenticator.route("/logout")
    def logout() -> Response:
        """
        Clears the authentication flag from the session.

        Returns:
            Response: {"authenticated": false}.
        """
        session.pop("authenticated", None)
        return jsonify({"authenticated": False})

    return authenticator
