"""
Error Handler for the Exper gateway
Centralized error handling and logging
"""

from flask import jsonify
import requests
import logging
import traceback

logger = logging.getLogger(__name__)

class ExperError(Exception):
    """Base exception class for the Exper gateway"""
    def __init__(self, message, status_code=500, error_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

class ValidationError(ExperError):
    """Raised when input validation fails"""
    def __init__(self, message, field=None):
        super().__init__(message, status_code=400, error_code='VALIDATION_ERROR')
        self.field = field

class AuthenticationError(ExperError):
    """Raised when authentication fails"""
    def __init__(self, message):
        super().__init__(message, status_code=401, error_code='AUTH_ERROR')

class AuthorizationError(ExperError):
    """Raised when user lacks required permissions"""
    def __init__(self, message):
        super().__init__(message, status_code=403, error_code='PERMISSION_ERROR')

class NotFoundError(ExperError):
    """Raised when requested resource is not found"""
    def __init__(self, message):
        super().__init__(message, status_code=404, error_code='NOT_FOUND')

class ServiceResponseError(ExperError):
    """Raised when a backend service answers with an error status"""
    def __init__(self, message, status_code=502, service_name=None):
        # Backend 5xx is our 502; 4xx is passed through
        if status_code >= 500:
            status_code = 502
        super().__init__(message, status_code=status_code, error_code='UPSTREAM_ERROR')
        self.service_name = service_name

class ExternalServiceError(ExperError):
    """Raised when external service call fails"""
    def __init__(self, message, service_name=None):
        super().__init__(message, status_code=503, error_code='SERVICE_ERROR')
        self.service_name = service_name

def handle_error(error):
    """
    Central error handler that converts exceptions to JSON responses.

    ExperError subclasses carry their own status and code. A few builtin and
    requests exceptions are mapped here; anything else is a 500 with the
    traceback logged.
    """
    try:
        if isinstance(error, ExperError):
            service = getattr(error, 'service_name', None)
            if error.status_code >= 500:
                logger.error(f"{service or 'gateway'} failure ({error.error_code}): {error.message}")
            else:
                logger.warning(f"Request rejected ({error.error_code}): {error.message}")
            return jsonify(format_error_response(error.message, error.error_code)), error.status_code

        if isinstance(error, KeyError):
            logger.warning(f"Missing key error: {str(error)}")
            return jsonify(format_error_response(f'Missing required field: {str(error)}', 'MISSING_FIELD')), 400

        if isinstance(error, ValueError):
            logger.warning(f"Invalid value: {str(error)}")
            return jsonify(format_error_response(str(error), 'VALIDATION_ERROR')), 400

        if isinstance(error, (requests.ConnectionError, requests.Timeout, TimeoutError)):
            logger.error(f"Connection error: {str(error)}")
            return jsonify(format_error_response('Service temporarily unavailable', 'CONNECTION_ERROR')), 503

        logger.error(f"Unhandled {type(error).__name__}: {str(error)}")
        logger.error(traceback.format_exc())
        return jsonify(format_error_response('An unexpected error occurred', 'INTERNAL_ERROR')), 500

    except Exception as e:
        # Failsafe error handling
        logger.critical(f"Error in error handler: {str(e)}")
        return jsonify(format_error_response('Critical system error', 'CRITICAL_ERROR')), 500

def validate_request_data(data, required_fields, optional_fields=None):
    """
    Validate request data against required and optional fields
    """
    if not data:
        raise ValidationError("Request body cannot be empty")

    missing_fields = [
        field for field in required_fields
        if field not in data or data[field] is None or data[field] == ''
    ]

    if missing_fields:
        raise ValidationError(f"Missing required fields: {', '.join(missing_fields)}")

    if optional_fields:
        for field, expected_type in optional_fields.items():
            if field in data and data[field] is not None:
                if not isinstance(data[field], expected_type):
                    names = expected_type.__name__ if isinstance(expected_type, type) \
                        else ' or '.join(t.__name__ for t in expected_type)
                    raise ValidationError(f"Field '{field}' must be of type {names}", field=field)

    return True

def format_error_response(error_message, error_code=None):
    """
    Format error API response
    """
    response = {
        'status': 'error',
        'error': error_message
    }

    if error_code:
        response['error_code'] = error_code

    return response
