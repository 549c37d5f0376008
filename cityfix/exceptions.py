"""
Typed failures raised below the HTTP layer.

Repositories, collaborators and the admin guard raise these; the handlers
registered in ``cityfix.main`` are the only place they become responses.
"""


class CityFixError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CityFixError):
    """Missing or malformed input."""
    status_code = 400


class AuthError(CityFixError):
    """Missing or invalid credentials."""
    status_code = 401


class ForbiddenError(AuthError):
    """Valid credentials without the required role."""
    status_code = 403


class NotFoundError(CityFixError):
    status_code = 404


class StorageError(CityFixError):
    """The key-value store, database or blob store failed."""
    status_code = 500
