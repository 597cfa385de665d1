"""
Error taxonomy shared by the data-access components and the HTTP layer.

Components raise these; the handlers registered by register_error_handlers()
turn them into the JSON error body used across the API:

    {"status": "error", "error": "<code>", "message": "...", "errors": [...]}
"""

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


class ApiError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self):
        body = {"status": "error", "error": self.code, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class InvalidArgument(ApiError):
    status_code = 400
    code = "invalid_argument"


class Unauthenticated(ApiError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(ApiError):
    status_code = 403
    code = "forbidden"


class NotFound(ApiError):
    status_code = 404
    code = "not_found"


class Conflict(ApiError):
    status_code = 409
    code = "conflict"


class InvalidState(ApiError):
    status_code = 422
    code = "invalid_state"


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        db.session.rollback()
        if error.status_code == 403:
            current_app.logger.warning(f"Access denied: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return (
            jsonify(
                {
                    "status": "error",
                    "error": error.name.lower().replace(" ", "_"),
                    "message": error.description,
                }
            ),
            error.code,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        current_app.logger.exception(f"Unhandled error: {error}")
        return jsonify({"status": "error", "message": "Internal server error"}), 500
