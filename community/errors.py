from datetime import datetime, timezone

from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException

from community import db


def error_envelope(status_code, message):
    """Uniform JSON body for every error leaving the app."""
    return {
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.full_path.rstrip('?') if request else None,
        "message": message,
    }


def register_error_handlers(app):

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        message = e.description or e.name
        return jsonify(error_envelope(e.code, message)), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e):
        db.session.rollback()
        current_app.logger.error(f"Internal Server Error on {request.method} {request.path}: {e}", exc_info=True)
        return jsonify(error_envelope(500, "Internal server error")), 500
