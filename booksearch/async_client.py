"""Async HTTP client for the Google Books catalog."""
import asyncio
import httpx
from typing import List, Optional, Dict, Any
import logging

from booksearch.models import Book, SearchScope
from booksearch.parse import parse_books_response, deduplicate_books
from booksearch.ports import CatalogLookupError, build_query

logger = logging.getLogger(__name__)


class AsyncGoogleBooksClient:
    """Async catalog client implementing the lookup port."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"
    MAX_PAGE_SIZE = 40

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30,
        max_results: int = 40,
        max_concurrent: int = 5,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize async client.

        Args:
            api_key: Optional API key
            timeout: Request timeout in seconds
            max_results: Page size requested per query (capped at 40)
            max_concurrent: Maximum concurrent requests
            client: Pre-built httpx client (owned by the caller)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.max_results = min(max_results, self.MAX_PAGE_SIZE)
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self, query: str) -> Dict[str, Any]:
        """
        Fetch one page of raw volumes for a query expression.

        Args:
            query: Value for the ``q`` parameter

        Returns:
            Decoded API response

        Raises:
            CatalogLookupError: On transport errors, non-200 status or bad JSON
        """
        params = {
            "q": query,
            "maxResults": self.max_results,
            "startIndex": 0
        }

        if self.api_key:
            params["key"] = self.api_key

        # Use semaphore to limit concurrency
        async with self.semaphore:
            try:
                logger.info(f"Async request: {query}")
                response = await self.client.get(self.BASE_URL, params=params)
            except httpx.TimeoutException as e:
                raise CatalogLookupError("timeout") from e
            except httpx.HTTPError as e:
                raise CatalogLookupError(f"Network error: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Status {response.status_code} for query: {query}")
            raise CatalogLookupError(f"HTTP {response.status_code} from catalog")

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogLookupError("Malformed response from catalog") from e

        if not isinstance(payload, dict):
            raise CatalogLookupError("Malformed response from catalog")
        return payload

    async def search(self, term: str, scope: SearchScope = SearchScope.ALL) -> List[Book]:
        """
        Search for books matching a term within a scope.

        Args:
            term: Non-blank search term
            scope: Fields to match against

        Returns:
            Books in catalog order, duplicates removed
        """
        payload = await self.fetch(build_query(term, scope))
        books = deduplicate_books(parse_books_response(payload))
        logger.info(f"Catalog returned {len(books)} books for '{term}' ({scope.value})")
        return books

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
