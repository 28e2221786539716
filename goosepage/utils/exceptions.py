class GoosepageError(Exception):
    """Base exception for all goosepage errors."""


class DocumentNotFound(GoosepageError):
    """Raised when a document is not found in the database."""


class NotConnected(GoosepageError):
    """Raised when attempting to use a database that is not connected."""


class PaginationError(GoosepageError):
    """Base class for errors caused by a bad pagination request."""


class MalformedCursor(PaginationError):
    """Raised when a cursor token cannot be decoded."""


class CursorMismatch(PaginationError):
    """Raised when a cursor does not fit the sort it is used with."""


class InvalidSort(PaginationError):
    """Raised when a sort specification cannot be interpreted."""


class InvalidPagination(PaginationError):
    """Raised for conflicting pagination options or configuration."""
