"""
Error Handlers for LexiStack

Provides:
- Custom exception classes
- Consistent error response format
- Flask error handlers
"""

from flask import jsonify, request, current_app
from typing import Optional, Dict, Any


class LexiStackError(Exception):
    """Base exception class for LexiStack."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(LexiStackError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None, back: str = None):
        details = {}
        if resource:
            details['resource'] = resource
        if back:
            details['back'] = back
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details=details or None
        )


class EmptyContentError(LexiStackError):
    """A content set reached a session with no usable questions."""

    def __init__(self, message: str = 'No questions found.', resource: str = None):
        super().__init__(
            message=message,
            code='NO_QUESTIONS',
            status_code=422,
            details={'resource': resource} if resource else None
        )


class ValidationError(LexiStackError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class DuplicateContentError(LexiStackError):
    """A content set with the same id already exists; imports never overwrite."""

    def __init__(self, message: str = 'ID already exists', resource: str = None):
        super().__init__(
            message=message,
            code='DUPLICATE_ID',
            status_code=409,
            details={'resource': resource} if resource else None
        )


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(LexiStackError)
    def handle_lexistack_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"{error.code}: {error.message}")
        else:
            current_app.logger.info(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        if '/api/' in request.path:
            return error_response('Endpoint not found', 'NOT_FOUND', 404)
        return error

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        if '/api/' in request.path:
            return error_response('Method not allowed', 'METHOD_NOT_ALLOWED', 405)
        return error

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        if '/api/' in request.path:
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
