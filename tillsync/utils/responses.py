"""
JSON Response Helpers
Turn domain errors and unexpected exceptions into the {success, error} shape
every endpoint returns.
"""

import logging
from flask import jsonify
from tillsync.constants import Messages
from tillsync.utils.error_logger import log_error

logger = logging.getLogger(__name__)


def error_response(error):
    """Response for a TillsyncError; server-side failures are also recorded"""
    if error.status_code >= 500:
        log_error(error, status_code=error.status_code)
    return jsonify(error.to_dict()), error.status_code


def internal_error_response(error, message=Messages.INTERNAL_ERROR):
    """Generic 500 for an unexpected exception; details go to the logs only"""
    logger.error(f"Unhandled error: {error}")
    log_error(error)
    return jsonify({'success': False, 'error': message}), 500


def bad_request(message):
    return jsonify({'success': False, 'error': message}), 400
