from typing import Any, List, Optional


class APIError(Exception):
    """Base class for errors that map onto an HTTP status at the boundary."""

    status_code: int = 500

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class InvalidInput(APIError):
    status_code = 400


class InvalidOperation(InvalidInput):
    """Well-formed request for an operation that is never allowed."""


class Unauthenticated(APIError):
    status_code = 401


class Forbidden(APIError):
    status_code = 403


class NotFound(APIError):
    status_code = 404


class Internal(APIError):
    status_code = 500
