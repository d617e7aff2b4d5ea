"""Text rendering of search states."""
import json
from typing import List

from tabulate import tabulate

from booksearch.models import Book, Empty, Error, Idle, Loading, SearchState, Success

IDLE_PROMPT = "Search books by title, author or ISBN."


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def format_books(books: List[Book], format_type: str = "table") -> str:
    """Format books in the specified format."""
    if format_type == "table":
        headers = ["Title", "Authors", "Published", "Pages", "Categories"]
        rows = [
            [
                _truncate(book.title, 50),
                _truncate(book.authors_str, 30),
                book.published_date or "Unknown",
                book.page_count or "N/A",
                _truncate(book.categories_str, 30)
            ]
            for book in books
        ]
        return tabulate(rows, headers=headers, tablefmt="grid")

    elif format_type == "json":
        books_dict = [
            {
                "id": book.id,
                "title": book.title,
                "subtitle": book.subtitle,
                "authors": list(book.authors),
                "publisher": book.publisher,
                "published_date": book.published_date,
                "description": book.description,
                "page_count": book.page_count,
                "categories": list(book.categories),
                "language": book.language,
                "image_url": book.image_url,
                "preview_link": book.preview_link,
                "info_link": book.info_link
            }
            for book in books
        ]
        return json.dumps(books_dict, indent=2)

    elif format_type == "compact":
        return "\n".join(
            f"{i}. {book.title} - {book.authors_str}"
            for i, book in enumerate(books, 1)
        )

    raise ValueError(f"Unknown format: {format_type}")


def render_state(state: SearchState, format_type: str = "table") -> str:
    """
    Render a search state for the terminal.

    Args:
        state: Snapshot to render
        format_type: Result list format (table, json, compact)

    Returns:
        Text for display
    """
    if isinstance(state, Idle):
        return IDLE_PROMPT
    if isinstance(state, Loading):
        return f"Searching books for '{state.query}' ({state.scope.value})..."
    if isinstance(state, Success):
        header = f"{len(state.books)} books for '{state.query}' ({state.scope.value})"
        return header + "\n" + format_books(list(state.books), format_type)
    if isinstance(state, Empty):
        return state.message
    if isinstance(state, Error):
        return f"Error: {state.message} (type :retry to try again)"
    raise TypeError(f"Unhandled search state: {state!r}")
