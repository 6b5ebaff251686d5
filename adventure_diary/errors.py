"""
adventure_diary/errors.py: how failures turn into JSON responses

Handlers raise APIError for domain problems (bad assignment body, removing
an item the character does not own). Validation and database errors are
raised as-is by pydantic and SQLAlchemy; the handlers registered here map
them to status codes so routes don't need try/except around every commit:

  pydantic ValidationError      -> 400 with per-field details
  IntegrityError (UNIQUE)       -> 409
  IntegrityError (FOREIGN KEY)  -> 400
  OperationalError (locked/busy)-> 503
  anything else from SQLAlchemy -> 500
  HTTPException (abort/404)     -> its own code, JSON body
"""

import logging

from flask import jsonify
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from adventure_diary import db

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised by route handlers for errors the client can fix."""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def describe_database_error(error):
    """Map a SQLAlchemy error to (status_code, message)."""
    text = str(getattr(error, 'orig', error))
    if isinstance(error, IntegrityError):
        if 'UNIQUE' in text:
            return 409, 'Resource already exists'
        if 'FOREIGN KEY' in text:
            return 400, 'Referenced resource does not exist'
        return 400, 'Database constraint violation'
    if isinstance(error, OperationalError) and ('locked' in text or 'busy' in text):
        return 503, 'Database is busy, please try again'
    return 500, 'Database operation failed'


def validation_details(error):
    return [
        {'field': '.'.join(str(part) for part in err['loc']) or 'body',
         'message': err['msg']}
        for err in error.errors()
    ]


def register_error_handlers(app):

    @app.errorhandler(APIError)
    def handle_api_error(error):
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({'error': 'Validation failed',
                        'details': validation_details(error)}), 400

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        # The session is unusable until rolled back; this also undoes any
        # half-finished multi-row write (bulk assign, import).
        db.session.rollback()
        status, message = describe_database_error(error)
        if status >= 500:
            logger.error('Database error: %s', error, exc_info=error)
        else:
            logger.info('Rejected write: %s', getattr(error, 'orig', error))
        return jsonify({'error': message}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code
