"""Backend utility functions for the Safety Checklist API."""
from flask import g, jsonify, request
from pydantic import ValidationError as PydanticValidationError
from shared.validation import format_pydantic_errors
import logging


logger = logging.getLogger(__name__)


def api_error(message, status_code=400, log_level='warning', details=None):
    """
    Standardized API error response with consistent logging.

    Args:
        message (str): Error message for the client
        status_code (int): HTTP status code
        log_level (str): Logging level ('debug', 'info', 'warning', 'error', 'critical')
        details (dict, optional): Additional details for logging

    Returns:
        Flask response: JSON error response
    """
    log_func = getattr(logger, log_level, logger.warning)
    if details:
        log_func(f"API Error ({status_code}): {message} - Details: {details}")
    else:
        log_func(f"API Error ({status_code}): {message}")
    return jsonify({'error': message}), status_code


def handle_api_exception(e, operation="operation", status_code=500):
    """
    Handle exceptions in API endpoints with consistent logging and responses.

    Args:
        e (Exception): The exception that occurred
        operation (str): Description of the operation being performed
        status_code (int): HTTP status code to return

    Returns:
        Flask response: JSON error response
    """
    logger.error(f"Exception during {operation}: {str(e)}", exc_info=True)
    return api_error(f"Failed to {operation}", status_code, 'error')


def parse_json_body(schema):
    """Validate the request JSON against a pydantic schema.

    Returns (model, None) on success or (None, error_response).
    """
    data = request.get_json(silent=True)
    if data is None:
        return None, api_error('Invalid JSON data')
    try:
        return schema(**data), None
    except PydanticValidationError as e:
        return None, api_error(format_pydantic_errors(e))


def current_user():
    """The user authenticated for this request, or None."""
    return getattr(g, 'user', None)
