"""Parse and normalize Google Books API responses and store rows."""
import logging
from typing import Dict, Any, List, Optional, Sequence

from src.models import CatalogEntry, Shelf, ShelfBook

logger = logging.getLogger(__name__)

# Column order used by every SELECT / RETURNING in src.database
SHELF_BOOK_COLUMNS = (
    "id", "user_id", "google_book_id", "title", "authors", "description",
    "thumbnail", "published_date", "shelf_type", "added_at"
)


def parse_catalog_entry(item: Dict[str, Any]) -> Optional[CatalogEntry]:
    """
    Parse a single volume item from Google Books API.

    Args:
        item: Single item from Google Books API response

    Returns:
        CatalogEntry or None if the item has no id or cannot be parsed
    """
    try:
        volume_info = item.get("volumeInfo") or {}

        # Extract fields with safe defaults
        book_id = item.get("id", "")
        if not book_id:
            return None

        title = volume_info.get("title") or "Unknown Title"
        authors = list(volume_info.get("authors") or [])
        description = volume_info.get("description")
        published_date = volume_info.get("publishedDate")

        image_links = volume_info.get("imageLinks") or {}
        thumbnail = image_links.get("thumbnail") or image_links.get("smallThumbnail")

        return CatalogEntry(
            id=book_id,
            title=title,
            authors=authors,
            description=description,
            thumbnail=thumbnail,
            published_date=published_date
        )
    except (AttributeError, TypeError) as e:
        # Log but don't crash - APIs can be unpredictable
        logger.warning(f"Failed to parse catalog entry: {e}")
        return None


def parse_search_response(response_json: Dict[str, Any], limit: Optional[int] = None) -> List[CatalogEntry]:
    """
    Parse full Google Books API response.

    Args:
        response_json: Complete API response JSON
        limit: Maximum number of entries to keep

    Returns:
        List of CatalogEntry objects (empty if no items found)
    """
    items = response_json.get("items") or []
    entries = []

    for item in items:
        entry = parse_catalog_entry(item)
        if entry:
            entries.append(entry)

    entries = deduplicate_entries(entries)
    if limit is not None:
        entries = entries[:limit]
    return entries


def deduplicate_entries(entries: List[CatalogEntry]) -> List[CatalogEntry]:
    """
    Remove duplicate entries by catalog ID, keeping the first.

    Args:
        entries: List of CatalogEntry objects

    Returns:
        Deduplicated list of entries
    """
    seen_ids = set()
    unique_entries = []

    for entry in entries:
        if entry.id not in seen_ids:
            seen_ids.add(entry.id)
            unique_entries.append(entry)

    return unique_entries


def parse_shelf_book_row(row: Sequence[Any]) -> ShelfBook:
    """Build a ShelfBook from a ``user_books`` row in SHELF_BOOK_COLUMNS order."""
    values = dict(zip(SHELF_BOOK_COLUMNS, row))
    return ShelfBook(
        id=str(values["id"]),
        user_id=str(values["user_id"]),
        google_book_id=values["google_book_id"],
        title=values["title"],
        authors=list(values["authors"] or []),
        description=values["description"],
        thumbnail=values["thumbnail"],
        published_date=values["published_date"],
        shelf_type=Shelf.parse(values["shelf_type"]),
        added_at=values["added_at"]
    )
