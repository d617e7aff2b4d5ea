"""Catalog lookup port and its failure channel."""
from typing import List, Protocol

from booksearch.models import Book, SearchScope


class BookSearchError(Exception):
    pass


class CatalogLookupError(BookSearchError):
    """Catalog lookup failed (network, parsing, or server error)."""
    pass


class CatalogLookup(Protocol):
    """Async interface for searching the remote catalog."""

    async def search(self, term: str, scope: SearchScope) -> List[Book]: ...


_SCOPE_PREFIXES = {
    SearchScope.ALL: "",
    SearchScope.TITLE: "intitle:",
    SearchScope.AUTHOR: "inauthor:",
}


def build_query(term: str, scope: SearchScope) -> str:
    """
    Turn a search term into a Google Books query expression.

    Args:
        term: Trimmed, non-blank search term
        scope: Fields the term should be matched against

    Returns:
        Query string for the ``q`` parameter

    Raises:
        ValueError: If the term is blank
    """
    term = term.strip()
    if not term:
        raise ValueError("Search term must not be blank")
    return f"{_SCOPE_PREFIXES[scope]}{term}"
