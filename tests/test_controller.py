"""Tests for the search, bookshelf and navbar controllers."""
from unittest.mock import MagicMock

import pytest

from src.controller import (
    AUTH_ROUTE,
    HOME_ROUTE,
    BookshelfController,
    NavbarController,
    SearchController,
)
from src.errors import SearchFailure, StoreFailure
from src.models import Shelf
from src.repository import ShelfRepository
from src.session import Identity, Session


class FakeSearchClient:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return list(self.results)


@pytest.fixture
def routes():
    return []


def _search_page(session, repository, routes, client=None):
    page = SearchController(session, client or FakeSearchClient(), repository, routes.append)
    page.mount()
    return page


def _shelf_page(session, repository, routes):
    page = BookshelfController(session, repository, routes.append)
    page.mount()
    return page


def test_mount_without_identity_redirects(store, routes):
    session = Session()
    page = SearchController(session, FakeSearchClient(), ShelfRepository(store, session), routes.append)

    assert page.mount() is False
    assert routes == [AUTH_ROUTE]
    assert page.mounted is False


def test_sign_out_event_redirects(session, repository, routes):
    page = _search_page(session, repository, routes)

    session.sign_out()

    assert routes == [AUTH_ROUTE]
    assert page.mounted is False


def test_unmount_stops_following_identity(session, repository, routes):
    page = _search_page(session, repository, routes)
    page.unmount()

    session.sign_out()

    assert routes == []


def test_blank_search_is_noop(session, repository, routes):
    client = FakeSearchClient()
    page = _search_page(session, repository, routes, client)

    assert page.submit_search("   ") is False
    assert client.queries == []
    assert page.notifications == []


def test_search_sets_results(session, repository, routes, dune):
    page = _search_page(session, repository, routes, FakeSearchClient([dune]))

    assert page.submit_search("dune") is True
    assert page.results == [dune]
    assert page.loading is False
    assert page.notifications == []


def test_search_without_results_notifies(session, repository, routes):
    page = _search_page(session, repository, routes, FakeSearchClient([]))

    page.submit_search("zzzzqqq")

    [note] = page.drain_notifications()
    assert note.title == "No results"
    assert not note.is_error


def test_search_failure_notifies(session, repository, routes):
    page = _search_page(session, repository, routes, FakeSearchClient(error=SearchFailure("offline")))

    assert page.submit_search("dune") is False

    [note] = page.notifications
    assert note.is_error
    assert note.description == "Failed to search books. Please try again."
    assert page.loading is False


def test_add_selected_success(session, repository, routes, dune):
    page = _search_page(session, repository, routes, FakeSearchClient([dune]))
    page.submit_search("dune")
    page.select(dune)
    page.choose_shelf("currently_reading")

    assert page.add_selected() is True

    assert page.selected is None
    assert page.drain_notifications()[0].description == "Book added to your shelf"
    assert repository.list_books()[0].shelf_type is Shelf.CURRENTLY_READING


def test_add_selected_default_shelf(session, repository, routes, dune):
    page = _search_page(session, repository, routes)
    page.select(dune)

    page.add_selected()

    assert repository.list_books()[0].shelf_type is Shelf.WANT_TO_READ


def test_add_duplicate_notifies_already_added(session, repository, routes, dune):
    page = _search_page(session, repository, routes)
    repository.add_book(dune, Shelf.READ)
    page.select(dune)

    assert page.add_selected() is False

    [note] = page.notifications
    assert note.title == "Already added"
    assert note.is_error
    assert page.selected is dune
    assert len(repository.list_books()) == 1


def test_add_store_failure_notifies_generic_error(session, routes, dune):
    repository = MagicMock()
    repository.add_book.side_effect = StoreFailure("connection lost")
    page = _search_page(session, repository, routes)
    page.select(dune)

    page.add_selected()

    assert page.notifications[0].description == "Failed to add book. Please try again."


def test_add_without_selection_is_noop(session, repository, routes):
    page = _search_page(session, repository, routes)
    assert page.add_selected() is False
    assert page.notifications == []


def test_bookshelf_mount_loads_books(session, repository, routes, dune, neuromancer):
    repository.add_book(dune, Shelf.WANT_TO_READ)
    repository.add_book(neuromancer, Shelf.READ)

    page = _shelf_page(session, repository, routes)

    assert page.loading is False
    assert [b.title for b in page.books_on_shelf(Shelf.WANT_TO_READ)] == ["Dune"]
    assert page.shelf_count(Shelf.READ) == 1
    assert page.shelf_count(Shelf.CURRENTLY_READING) == 0


def test_bookshelf_load_failure_notifies(session, routes):
    repository = MagicMock()
    repository.list_books.side_effect = StoreFailure("down")

    page = _shelf_page(session, repository, routes)

    assert page.books == []
    assert page.notifications[0].description == "Failed to load books. Please try again."


def test_move_reloads_and_notifies(session, repository, routes, dune):
    book = repository.add_book(dune, Shelf.WANT_TO_READ)
    page = _shelf_page(session, repository, routes)

    assert page.move_book(book.id, "read") is True

    assert page.shelf_count(Shelf.READ) == 1
    assert page.shelf_count(Shelf.WANT_TO_READ) == 0
    assert page.drain_notifications()[0].description == "Book moved to new shelf"


def test_move_failure_keeps_state(session, repository, routes, dune):
    repository.add_book(dune, Shelf.WANT_TO_READ)
    page = _shelf_page(session, repository, routes)

    assert page.move_book("missing", Shelf.READ) is False

    assert page.shelf_count(Shelf.WANT_TO_READ) == 1
    assert page.notifications[0].description == "Failed to move book. Please try again."


def test_remove_reloads_and_notifies(session, repository, routes, dune):
    book = repository.add_book(dune, Shelf.WANT_TO_READ)
    page = _shelf_page(session, repository, routes)

    assert page.remove_book(book.id) is True

    assert page.books == []
    assert page.drain_notifications()[0].description == "Book removed from shelf"


def test_stale_response_after_sign_out_is_ignored(session, routes, dune):
    """Test that a mutation resolving after the page left changes nothing."""
    repository = MagicMock()
    repository.list_books.return_value = []
    repository.move_book.side_effect = lambda book_id, shelf: session.sign_out()
    page = _shelf_page(session, repository, routes)
    repository.list_books.reset_mock()

    assert page.move_book("b1", Shelf.READ) is False

    assert routes == [AUTH_ROUTE]
    repository.list_books.assert_not_called()
    assert page.notifications == []


def test_new_identity_reloads_bookshelf(store, routes, dune):
    first = Identity.for_email("first@example.com")
    second = Identity.for_email("second@example.com")
    session = Session(first)
    repository = ShelfRepository(store, session)
    page = _shelf_page(session, repository, routes)
    ShelfRepository(store, Session(second)).add_book(dune, Shelf.READ)

    session.sign_in(second)

    assert page.user == second
    assert [b.title for b in page.books] == ["Dune"]


def test_navbar_sign_out(session, routes):
    navbar = NavbarController(session, routes.append)

    assert navbar.sign_out() is True

    assert session.current_identity() is None
    assert routes == [HOME_ROUTE]
    assert navbar.drain_notifications()[0].description == "Logged out successfully"


def test_dune_scenario(session, repository, routes, dune):
    """Search, add, move and remove a book end to end."""
    search_page = _search_page(session, repository, routes, FakeSearchClient([dune]))
    search_page.submit_search("dune")
    assert any("Dune" in entry.title for entry in search_page.results)

    search_page.select(search_page.results[0])
    search_page.choose_shelf(Shelf.WANT_TO_READ)
    assert search_page.add_selected()

    shelf_page = _shelf_page(session, repository, routes)
    [book] = shelf_page.books_on_shelf(Shelf.WANT_TO_READ)

    shelf_page.move_book(book.id, Shelf.READ)
    assert book.id in [b.id for b in repository.list_books(Shelf.READ)]
    assert book.id not in [b.id for b in repository.list_books(Shelf.WANT_TO_READ)]

    shelf_page.remove_book(book.id)
    for shelf in Shelf:
        assert book.id not in [b.id for b in repository.list_books(shelf)]
    assert repository.list_books() == []
