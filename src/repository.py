"""Shelf repository: per-user CRUD over the shelf store."""
import logging
from typing import List, Optional

from src.errors import NotAuthenticated, ShelfBookNotFound
from src.models import CatalogEntry, Shelf, ShelfBook
from src.session import Identity, Session

logger = logging.getLogger(__name__)


class ShelfRepository:
    """
    List, add, move and remove books for the signed-in user.

    Every call resolves the identity from the injected session first and
    fails with NotAuthenticated before touching the store when there is
    none. Move and remove are scoped by user id, so another user's book
    id behaves like a missing one.
    """

    def __init__(self, store, session: Session):
        """
        Args:
            store: Object with list_books, insert_book, update_shelf and
                delete_book (see src.database.Database)
            session: Session context supplying the current identity
        """
        self.store = store
        self.session = session

    def _require_identity(self) -> Identity:
        identity = self.session.current_identity()
        if identity is None:
            raise NotAuthenticated()
        return identity

    def list_books(self, shelf: Optional[Shelf] = None) -> List[ShelfBook]:
        """Return the user's books, newest first, optionally on one shelf."""
        identity = self._require_identity()
        shelf_type = Shelf.parse(shelf).value if shelf is not None else None
        return self.store.list_books(identity.user_id, shelf_type)

    def add_book(self, entry: CatalogEntry, shelf: Shelf) -> ShelfBook:
        """
        Save a catalog entry onto a shelf.

        Raises:
            NotAuthenticated: no signed-in identity
            DuplicateEntry: the entry is already on one of the user's shelves
            StoreFailure: any other store error
        """
        identity = self._require_identity()
        shelf = Shelf.parse(shelf)
        record = {
            "user_id": identity.user_id,
            "google_book_id": entry.id,
            "title": entry.title,
            "authors": list(entry.authors),
            "description": entry.description or None,
            "thumbnail": entry.thumbnail or None,
            "published_date": entry.published_date or None,
            "shelf_type": shelf.value,
        }
        book = self.store.insert_book(record)
        logger.info(f"Added '{entry.title}' to {shelf.label}")
        return book

    def move_book(self, book_id: str, shelf: Shelf):
        """Change the shelf of one of the user's books."""
        identity = self._require_identity()
        shelf = Shelf.parse(shelf)
        if not self.store.update_shelf(book_id, identity.user_id, shelf.value):
            raise ShelfBookNotFound(f"No book {book_id} on your shelves")

    def remove_book(self, book_id: str):
        """Delete one of the user's books."""
        identity = self._require_identity()
        if not self.store.delete_book(book_id, identity.user_id):
            raise ShelfBookNotFound(f"No book {book_id} on your shelves")
