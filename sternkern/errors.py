import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class SternkernError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(SternkernError):
    status_code = 400


class NotFoundError(SternkernError):
    status_code = 404


class ConflictError(SternkernError):
    status_code = 409


class DuplicateInvoiceError(ConflictError):
    pass


class StoreError(SternkernError):
    """The database rejected or failed a read or write."""
    status_code = 503


class ConsistencyError(SternkernError):
    """A multi-write operation failed part way through.

    Carries the steps that had completed, the ones that were undone, and any
    compensation that itself failed and needs manual correction.
    """
    status_code = 500

    def __init__(self, message, completed=(), compensated=(), unresolved=(), cause=None):
        super().__init__(message)
        self.completed = list(completed)
        self.compensated = list(compensated)
        self.unresolved = list(unresolved)
        self.cause = cause

    def to_dict(self):
        return {
            'error': self.message,
            'completed_steps': self.completed,
            'compensated_steps': self.compensated,
            'unresolved_steps': self.unresolved,
        }


def register_error_handlers(app):
    @app.errorhandler(SternkernError)
    def handle_sternkern_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({'error': 'Login required'}), 401

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({'error': 'Not permitted for this role'}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404
