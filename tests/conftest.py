"""Shared fixtures: an in-memory shelf store and session helpers."""
import itertools
import uuid
from datetime import datetime, timedelta

import pytest

from src.errors import DuplicateEntry
from src.models import CatalogEntry, Shelf, ShelfBook
from src.repository import ShelfRepository
from src.session import Identity, Session


class FakeStore:
    """In-memory stand-in for src.database.Database."""

    def __init__(self):
        self.rows = {}
        self.calls = []
        self.closed = False
        self._clock = itertools.count()

    def close(self):
        self.closed = True

    def list_books(self, user_id, shelf_type=None):
        self.calls.append(("list_books", user_id, shelf_type))
        books = [
            book for book in self.rows.values()
            if book.user_id == user_id and (shelf_type is None or book.shelf_type.value == shelf_type)
        ]
        return sorted(books, key=lambda b: b.added_at, reverse=True)

    def insert_book(self, record):
        self.calls.append(("insert_book", record["user_id"], record["google_book_id"]))
        for book in self.rows.values():
            if book.user_id == record["user_id"] and book.google_book_id == record["google_book_id"]:
                raise DuplicateEntry("duplicate key value violates unique constraint")
        book = ShelfBook(
            id=str(uuid.uuid4()),
            user_id=record["user_id"],
            google_book_id=record["google_book_id"],
            title=record["title"],
            authors=list(record["authors"]),
            description=record["description"],
            thumbnail=record["thumbnail"],
            published_date=record["published_date"],
            shelf_type=Shelf(record["shelf_type"]),
            added_at=datetime(2024, 1, 1) + timedelta(seconds=next(self._clock))
        )
        self.rows[book.id] = book
        return book

    def update_shelf(self, book_id, user_id, shelf_type):
        self.calls.append(("update_shelf", book_id, shelf_type))
        book = self.rows.get(book_id)
        if book is None or book.user_id != user_id:
            return 0
        book.shelf_type = Shelf(shelf_type)
        return 1

    def delete_book(self, book_id, user_id):
        self.calls.append(("delete_book", book_id))
        book = self.rows.get(book_id)
        if book is None or book.user_id != user_id:
            return 0
        del self.rows[book_id]
        return 1


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def reader():
    return Identity.for_email("reader@example.com")


@pytest.fixture
def session(reader):
    return Session(reader)


@pytest.fixture
def repository(store, session):
    return ShelfRepository(store, session)


@pytest.fixture
def dune():
    return CatalogEntry(
        id="B1FDnwEACAAJ",
        title="Dune",
        authors=["Frank Herbert"],
        description="Set on the desert planet Arrakis",
        thumbnail="http://books.google.com/dune.jpg",
        published_date="1965"
    )


@pytest.fixture
def neuromancer():
    return CatalogEntry(id="neuro1", title="Neuromancer", authors=["William Gibson"])
