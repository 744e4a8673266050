"""
API Errors
Every failure a handler can report is one of these; create_app turns them
into a JSON {"error": message} body.
"""


class ApiError(Exception):
    """Base class for errors reported to the API caller"""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(ApiError):
    """Missing or invalid input field"""
    status_code = 400


class AuthenticationError(ApiError):
    """Missing, invalid or expired credentials"""
    status_code = 401


class AuthorizationError(ApiError):
    """Authenticated, but not allowed to do this"""
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class StateError(ApiError):
    """Operation not valid for the complaint's current state"""
    status_code = 400


class StorageError(ApiError):
    """Persistence failure; details stay in the server log"""
    status_code = 500

    def __init__(self, message='Database error'):
        super().__init__(message)
