"""Error types raised by the search client, store and repository."""


class BookVerseError(Exception):
    """Base class for all application errors."""
    pass


class NotAuthenticated(BookVerseError):
    """Raised when an identity-scoped operation runs without an identity."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class TransportFailure(BookVerseError):
    """Raised when an outbound request cannot be completed."""
    pass


class SearchFailure(TransportFailure):
    """Raised when a catalog search fails in transport or parsing."""
    pass


class DuplicateEntry(BookVerseError):
    """Raised when the store rejects an insert on a uniqueness constraint."""
    pass


class StoreFailure(BookVerseError):
    """Raised for any other persistence error."""
    pass


class ShelfBookNotFound(StoreFailure):
    """Raised when a book does not exist for the current user."""
    pass
