"""Data models for catalog entries and shelved books."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List

DEFAULT_THUMBNAIL = "https://via.placeholder.com/128x192/e8dcc4/8b6f47?text=No+Cover"


class Shelf(str, Enum):
    """The three fixed shelves a saved book can sit on."""
    WANT_TO_READ = "want_to_read"
    CURRENTLY_READING = "currently_reading"
    READ = "read"

    @property
    def label(self) -> str:
        """Human readable shelf name."""
        return _SHELF_LABELS[self]

    @classmethod
    def parse(cls, value) -> "Shelf":
        """
        Coerce a shelf value or name into a Shelf.

        Raises:
            ValueError: if the value is not one of the three shelves
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown shelf '{value}' (expected one of: {valid})")


_SHELF_LABELS = {
    Shelf.WANT_TO_READ: "Want to Read",
    Shelf.CURRENTLY_READING: "Currently Reading",
    Shelf.READ: "Read",
}


def _format_authors(authors: List[str]) -> str:
    return ", ".join(authors) if authors else "Unknown Author"


@dataclass
class CatalogEntry:
    """Normalized search result from the book catalog."""
    id: str
    title: str
    authors: List[str] = field(default_factory=list)
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    published_date: Optional[str] = None

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return _format_authors(self.authors)

    @property
    def cover_url(self) -> str:
        return self.thumbnail or DEFAULT_THUMBNAIL


@dataclass
class ShelfBook:
    """A book saved on one of the user's shelves."""
    id: str
    user_id: str
    google_book_id: str
    title: str
    authors: List[str]
    description: Optional[str]
    thumbnail: Optional[str]
    published_date: Optional[str]
    shelf_type: Shelf
    added_at: Optional[datetime] = None

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return _format_authors(self.authors)

    @property
    def cover_url(self) -> str:
        return self.thumbnail or DEFAULT_THUMBNAIL

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "google_book_id": self.google_book_id,
            "title": self.title,
            "authors": self.authors,
            "description": self.description,
            "thumbnail": self.thumbnail,
            "cover_url": self.cover_url,
            "published_date": self.published_date,
            "shelf_type": self.shelf_type.value,
            "added_at": self.added_at.isoformat() if self.added_at else None,
        }
