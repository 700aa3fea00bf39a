"""Tests for shelf enumeration and model helpers."""
import pytest

from src.models import DEFAULT_THUMBNAIL, CatalogEntry, Shelf, ShelfBook


def test_shelf_values():
    """Test the three fixed shelf values."""
    assert [s.value for s in Shelf] == ["want_to_read", "currently_reading", "read"]


def test_shelf_labels():
    assert Shelf.WANT_TO_READ.label == "Want to Read"
    assert Shelf.CURRENTLY_READING.label == "Currently Reading"
    assert Shelf.READ.label == "Read"


def test_shelf_parse():
    """Test coercing strings into shelves."""
    assert Shelf.parse("read") is Shelf.READ
    assert Shelf.parse(" Currently_Reading ") is Shelf.CURRENTLY_READING
    assert Shelf.parse(Shelf.WANT_TO_READ) is Shelf.WANT_TO_READ


def test_shelf_parse_unknown():
    with pytest.raises(ValueError, match="Unknown shelf"):
        Shelf.parse("abandoned")


def test_authors_str():
    assert CatalogEntry("1", "T", ["A", "B"]).authors_str == "A, B"
    assert CatalogEntry("1", "T").authors_str == "Unknown Author"


def test_cover_url_default():
    assert CatalogEntry("1", "T").cover_url == DEFAULT_THUMBNAIL
    assert CatalogEntry("1", "T", thumbnail="http://x/y.jpg").cover_url == "http://x/y.jpg"


def test_shelf_book_to_dict():
    book = ShelfBook("id1", "u1", "g1", "Dune", ["Frank Herbert"], None, None, "1965", Shelf.READ)

    data = book.to_dict()

    assert data["shelf_type"] == "read"
    assert data["added_at"] is None
    assert data["cover_url"] == DEFAULT_THUMBNAIL
    assert "user_id" not in data
