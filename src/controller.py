"""View controllers for the search page, the bookshelf page and the navbar."""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from src.errors import BookVerseError, DuplicateEntry
from src.models import CatalogEntry, Shelf, ShelfBook
from src.session import Identity, Session

logger = logging.getLogger(__name__)

AUTH_ROUTE = "/auth"
HOME_ROUTE = "/"

# Failures turned into notifications instead of propagating to the caller
HANDLED_ERRORS = (BookVerseError, ValueError)

Redirect = Callable[[str], None]


@dataclass
class Notification:
    """A transient message for the user."""
    title: str
    description: str
    variant: str = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class Notifier:
    """Collects notifications until the front-end drains them."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str, destructive: bool = False):
        variant = "destructive" if destructive else "default"
        self.notifications.append(Notification(title, description, variant))

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending


class PageController(Notifier):
    """
    Lifecycle shared by pages that need a signed-in user.

    ``mount`` redirects to the auth route when nobody is signed in and
    otherwise follows identity changes until ``unmount``. Once a page has
    left (unmounted or redirected), responses that arrive late are dropped.
    """

    def __init__(self, session: Session, redirect: Redirect):
        super().__init__()
        self.session = session
        self.redirect = redirect
        self.user: Optional[Identity] = None
        self.mounted = False
        self._subscription = None

    def mount(self) -> bool:
        identity = self.session.current_identity()
        if identity is None:
            self.redirect(AUTH_ROUTE)
            return False

        self.user = identity
        self.mounted = True
        self._subscription = self.session.subscribe(self._on_identity_change)
        self.on_user(identity)
        return True

    def unmount(self):
        self.mounted = False
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_identity_change(self, event: str, identity: Optional[Identity]):
        if not self.mounted:
            return
        if identity is None:
            logger.info(f"Identity lost ({event}), leaving page")
            self.unmount()
            self.redirect(AUTH_ROUTE)
            return
        changed = identity != self.user
        self.user = identity
        if changed:
            self.on_user(identity)

    def on_user(self, identity: Identity):
        """Hook run when a (new) identity becomes active."""
        pass

    def notify(self, title: str, description: str, destructive: bool = False):
        if not self.mounted:
            logger.debug(f"Dropping notification for left page: {title}")
            return
        super().notify(title, description, destructive)


class SearchController(PageController):
    """Search page: catalog search plus the add-to-shelf dialog."""

    def __init__(self, session: Session, client, repository, redirect: Redirect):
        super().__init__(session, redirect)
        self.client = client
        self.repository = repository
        self.results: List[CatalogEntry] = []
        self.loading = False
        self.selected: Optional[CatalogEntry] = None
        self.selected_shelf = Shelf.WANT_TO_READ

    def submit_search(self, query: str) -> bool:
        if not (query or "").strip():
            return False

        self.loading = True
        try:
            results = self.client.search(query)
        except HANDLED_ERRORS as e:
            logger.error(f"Search failed: {e}")
            self.notify("Error", "Failed to search books. Please try again.", destructive=True)
            return False
        finally:
            self.loading = False

        if not self.mounted:
            return False

        self.results = results
        if not results:
            self.notify("No results", "No books found. Try a different search term.")
        return True

    def select(self, entry: CatalogEntry):
        self.selected = entry

    def choose_shelf(self, shelf):
        self.selected_shelf = Shelf.parse(shelf)

    def add_selected(self) -> bool:
        if self.selected is None:
            return False

        try:
            self.repository.add_book(self.selected, self.selected_shelf)
        except DuplicateEntry:
            self.notify("Already added", "This book is already on your shelf", destructive=True)
            return False
        except HANDLED_ERRORS as e:
            logger.error(f"Add to shelf failed: {e}")
            self.notify("Error", "Failed to add book. Please try again.", destructive=True)
            return False

        if not self.mounted:
            return False

        self.notify("Success!", "Book added to your shelf")
        self.selected = None
        return True


class BookshelfController(PageController):
    """Bookshelf page: the user's books grouped into shelf tabs."""

    def __init__(self, session: Session, repository, redirect: Redirect):
        super().__init__(session, redirect)
        self.repository = repository
        self.books: List[ShelfBook] = []
        self.loading = True
        self.active_shelf = Shelf.WANT_TO_READ

    def on_user(self, identity: Identity):
        self.load_books()

    def load_books(self) -> bool:
        self.loading = True
        try:
            books = self.repository.list_books()
        except HANDLED_ERRORS as e:
            logger.error(f"Loading books failed: {e}")
            self.notify("Error", "Failed to load books. Please try again.", destructive=True)
            return False
        finally:
            self.loading = False

        if not self.mounted:
            return False

        self.books = books
        return True

    def move_book(self, book_id: str, shelf) -> bool:
        try:
            self.repository.move_book(book_id, shelf)
        except HANDLED_ERRORS as e:
            logger.error(f"Move failed for {book_id}: {e}")
            self.notify("Error", "Failed to move book. Please try again.", destructive=True)
            return False

        if not self.mounted:
            return False

        self.load_books()
        self.notify("Success!", "Book moved to new shelf")
        return True

    def remove_book(self, book_id: str) -> bool:
        try:
            self.repository.remove_book(book_id)
        except HANDLED_ERRORS as e:
            logger.error(f"Remove failed for {book_id}: {e}")
            self.notify("Error", "Failed to remove book. Please try again.", destructive=True)
            return False

        if not self.mounted:
            return False

        self.load_books()
        self.notify("Success!", "Book removed from shelf")
        return True

    def set_active_shelf(self, shelf):
        self.active_shelf = Shelf.parse(shelf)

    def books_on_shelf(self, shelf) -> List[ShelfBook]:
        shelf = Shelf.parse(shelf)
        return [book for book in self.books if book.shelf_type == shelf]

    def shelf_count(self, shelf) -> int:
        return len(self.books_on_shelf(shelf))


class NavbarController(Notifier):
    """Sign-out action shown on every page."""

    def __init__(self, session: Session, redirect: Redirect):
        super().__init__()
        self.session = session
        self.redirect = redirect

    @property
    def user(self) -> Optional[Identity]:
        return self.session.current_identity()

    def sign_out(self) -> bool:
        try:
            self.session.sign_out()
        except OSError as e:
            logger.error(f"Sign out failed: {e}")
            self.notify("Error", "Failed to log out. Please try again.", destructive=True)
            return False

        self.notify("Success", "Logged out successfully")
        self.redirect(HOME_ROUTE)
        return True
