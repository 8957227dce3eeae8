"""
OpenGames - Custom Exceptions and Exception Handlers
"""
import enum

import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class OpenGamesException(Exception):
    """Base exception for OpenGames"""
    status_code = 400

    def __init__(self, message: str, code: str = "OPENGAMES_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'error': {
                'code': self.code,
                'message': self.message,
            }
        }


class ValidationException(OpenGamesException):
    """Malformed slug, missing or short search query, bad admin payload"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="BAD_REQUEST")
        logger.warning(f"Validation error: {message}")


class NotFoundException(OpenGamesException):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", code="NOT_FOUND")


class AuthenticationException(OpenGamesException):
    """Authentication-related exceptions"""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")
        logger.warning(f"Authentication error: {message}")


class DatastoreErrorKind(enum.Enum):
    NOT_CONFIGURED = "not_configured"
    MISSING_INDEX = "missing_index"
    QUERY_FAILED = "query_failed"


class DatastoreError(OpenGamesException):
    """
    Relational store failure. Callers branch on `kind`, never on the message:
    only MISSING_INDEX has a local recovery path (substring search).
    """
    status_code = 500

    def __init__(self, kind: DatastoreErrorKind, message: str):
        self.kind = kind
        super().__init__(message, code="DATABASE_ERROR")
        if kind is not DatastoreErrorKind.MISSING_INDEX:
            logger.error(f"Database error ({kind.value}): {message}")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        response = jsonify({
            'error': {
                'code': e.name.upper().replace(' ', '_'),
                'message': e.description,
            }
        })
        response.headers["Cache-Control"] = "no-store"
        return response, e.code

    @app.errorhandler(DatastoreError)
    def handle_datastore_exception(e):
        # Detail stays in the server log
        response = jsonify({
            'error': {
                'code': 'INTERNAL_ERROR',
                'message': 'Internal server error',
            }
        })
        response.headers["Cache-Control"] = "no-store"
        return response, 500

    @app.errorhandler(OpenGamesException)
    def handle_opengames_exception(e):
        """Handle OpenGames custom exceptions"""
        response = jsonify(e.to_dict())
        response.headers["Cache-Control"] = "no-store"
        return response, e.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        response = jsonify({
            'error': {
                'code': 'INTERNAL_ERROR',
                'message': 'Internal server error',
            }
        })
        response.headers["Cache-Control"] = "no-store"
        return response, 500
