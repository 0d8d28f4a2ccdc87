# impactnow/utils/error_handler.py
"""
JSON error responses for the API
"""

from http import HTTPStatus

from flask import jsonify
from werkzeug.exceptions import HTTPException


def json_error(message, status=HTTPStatus.INTERNAL_SERVER_ERROR):
    return jsonify({"error": message}), status


def init_error_handlers(app, db):
    """Register app-wide handlers so unrouted and unhandled errors stay JSON"""

    @app.errorhandler(404)
    def not_found_error(error):
        return json_error("Resource not found", HTTPStatus.NOT_FOUND)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return json_error("Method not allowed", HTTPStatus.METHOD_NOT_ALLOWED)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled server error: {str(error)}", exc_info=True)
        return json_error("Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return json_error(error.description or error.name, error.code)
