"""
Domain error taxonomy.

Services raise these exceptions; the API layer renders them into the
``{"success": false, "message": ...}`` envelope using the HTTP status
attached to each class.  Only ``StoreUnavailableError`` describes a
condition that may go away on its own, so it is the only one a caller
should consider retrying.
"""

from fastapi import status


class LibraryError(Exception):
    """Base class for every failure reported by the core services."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    """A field is missing or malformed."""


class DuplicateKeyError(LibraryError):
    """Another record already owns the natural key (ISBN, enrollment number)."""


class ReferenceInUseError(LibraryError):
    """The record cannot be deleted while copies or loans still point to it."""


class ReturnFailedError(LibraryError):
    """The return procedure rejected the loan."""


class NotFoundError(LibraryError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreUnavailableError(LibraryError):
    """The database could not be reached or is locked."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
