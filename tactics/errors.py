"""
tactics/errors.py: API error taxonomy and the handlers that render it

Route and rule code raises one of these; nothing is written before the
raise, and the handler rolls back the session so a rejected request never
leaves partial state behind.

  Unauthenticated  401  no logged-in user
  Forbidden        403  logged in, but not allowed (role or ownership)
  NotFound         404  entity missing, or not under the expected parent
  InvalidInput     400  payload failed validation; details lists the fields
  Conflict         409  capacity reached, duplicate token, stale reorder set
"""

from flask import jsonify
from pydantic import ValidationError


class ApiError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_dict(self):
        body = {'error': self.message}
        if self.details is not None:
            body['details'] = self.details
        return body


class Unauthenticated(ApiError):
    status_code = 401
    message = 'Unauthorized'


class Forbidden(ApiError):
    status_code = 403
    message = 'Forbidden'


class NotFound(ApiError):
    status_code = 404
    message = 'Not found'


class InvalidInput(ApiError):
    status_code = 400
    message = 'Invalid request'


class Conflict(ApiError):
    status_code = 409
    message = 'Conflict'


def validation_details(exc):
    """Reduce a pydantic ValidationError to a JSON-safe list of violations."""
    return [
        {
            'field': '.'.join(str(part) for part in err['loc']),
            'message': err['msg'],
            'type': err['type'],
        }
        for err in exc.errors()
    ]


def register_error_handlers(app):
    from tactics import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        db.session.rollback()
        return jsonify({'error': 'Invalid request',
                        'details': validation_details(error)}), 400

    @app.errorhandler(404)
    def handle_unknown_route(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def handle_bad_method(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(413)
    def handle_too_large(error):
        return jsonify({'error': 'Upload too large'}), 413

    @app.errorhandler(429)
    def handle_rate_limited(error):
        return jsonify({'error': 'Too many requests'}), 429

    @app.errorhandler(500)
    def handle_internal_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', getattr(error, 'original_exception', error))
        return jsonify({'error': 'Internal server error'}), 500
