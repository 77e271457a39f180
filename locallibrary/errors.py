import logging

from flask import render_template
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import SQLAlchemyError

from . import db

logger = logging.getLogger(__name__)


def _error_page(status, message):
    return render_template('error.html', title=f"Error {status}", status=status, message=message), status


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return _error_page(404, getattr(e, 'description', None) or "Not found")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error_page(405, "Method not allowed")

    @app.errorhandler(CSRFError)
    def csrf_error(e):
        logger.warning("Rejected form post: %s", e.description)
        return _error_page(400, e.description)

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        logger.exception("Database error")
        return _error_page(500, "The catalog database could not complete the request.")

    @app.errorhandler(500)
    def internal_error(e):
        return _error_page(500, "Internal server error")
