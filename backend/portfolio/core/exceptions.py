"""
Domain errors raised by the services.

Each error carries the message shown to the client and the HTTP status
it is reported with. Business failures (validation, conflicts, bad
credentials) stay on 200 with ``success: false`` so the frontend can show
the message inline; missing login and missing privileges use 401/403.
"""
from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_200_OK

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """Missing or mismatched fields"""


class ConflictError(ServiceError):
    """Username or email already registered"""


class AuthError(ServiceError):
    """Bad credentials"""


class LoginRequiredError(AuthError):
    """Action needs an active session"""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ServiceError):
    """Logged in, but not allowed"""
    status_code = status.HTTP_403_FORBIDDEN


class SystemFailureError(ServiceError):
    """Database unavailable or query failure; details are only logged"""
