"""Parse and normalize Google Books API responses."""
import logging
from typing import Dict, Any, List, Optional, Tuple

from booksearch.models import Book

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> Tuple[str, ...]:
    """Keep only string entries of a JSON list; anything else is empty."""
    if not isinstance(value, list):
        return ()
    return tuple(entry for entry in value if isinstance(entry, str))


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single volume item from Google Books API.

    Args:
        item: Single item from Google Books API response

    Returns:
        Book object or None if the item is unusable
    """
    try:
        volume_info = item.get("volumeInfo") or {}

        book_id = item.get("id", "")
        if not book_id:
            return None

        page_count = volume_info.get("pageCount")
        if not isinstance(page_count, int) or page_count < 0:
            page_count = None

        image_links = volume_info.get("imageLinks") or {}

        return Book(
            id=book_id,
            title=volume_info.get("title") or "Unknown Title",
            subtitle=volume_info.get("subtitle"),
            authors=_string_list(volume_info.get("authors")),
            publisher=volume_info.get("publisher"),
            published_date=volume_info.get("publishedDate"),
            description=volume_info.get("description"),
            page_count=page_count,
            categories=_string_list(volume_info.get("categories")),
            language=volume_info.get("language"),
            thumbnail=image_links.get("thumbnail"),
            small_thumbnail=image_links.get("smallThumbnail"),
            preview_link=volume_info.get("previewLink"),
            info_link=volume_info.get("infoLink"),
        )
    except (AttributeError, TypeError) as e:
        # Skip malformed entries instead of failing the whole page
        logger.warning(f"Failed to parse book: {e}")
        return None


def parse_books_response(response_json: Dict[str, Any]) -> List[Book]:
    """
    Parse full Google Books API response.

    Args:
        response_json: Complete API response JSON

    Returns:
        List of Book objects in response order (empty if no items found)
    """
    items = response_json.get("items") or []
    books = []

    for item in items:
        book = parse_book(item)
        if book:
            books.append(book)

    return books


def deduplicate_books(books: List[Book]) -> List[Book]:
    """Remove duplicate books by ID, keeping the first occurrence."""
    seen_ids = set()
    unique_books = []

    for book in books:
        if book.id not in seen_ids:
            seen_ids.add(book.id)
            unique_books.append(book)

    return unique_books
