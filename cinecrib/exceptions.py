"""Application exception hierarchy.

Each error maps to one HTTP status in ``cinecrib.main``; services raise these
and leave rendering to the app's exception handlers.
"""


class CineCribError(Exception):
    """Base class for application errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CineCribError):
    """Malformed or out-of-range input supplied by the caller."""

    status_code = 400


class NotFoundError(CineCribError):
    """A referenced record does not exist."""

    status_code = 404


class ConflictError(CineCribError):
    """The write would duplicate an existing record."""

    status_code = 409


class StorageError(CineCribError):
    """The database is unreachable or a query failed.

    Not retried here; the caller decides on retry policy.
    """

    status_code = 503
