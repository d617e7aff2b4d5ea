"""Blocking HTTP client for the Google Books catalog with resilience patterns."""
import asyncio
import time
import random
import requests
from typing import Optional, Dict, Any, List
import logging

from booksearch.models import Book, SearchScope
from booksearch.parse import parse_books_response, deduplicate_books
from booksearch.ports import CatalogLookupError, build_query

logger = logging.getLogger(__name__)


class GoogleBooksClient:
    """Client for Google Books API with timeouts, retries, and backoff."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30,
        max_results: int = 40,
        max_retries: int = 3,
        base_backoff: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Google Books API client.

        Args:
            api_key: Optional API key (increases rate limits)
            timeout: Request timeout in seconds
            max_results: Page size requested per query (1-40)
            max_retries: Maximum number of attempts
            base_backoff: Base delay for exponential backoff
            session: Optional pre-configured session
        """
        self.api_key = api_key
        self.timeout = timeout
        self.max_results = min(max_results, 40)  # API limit
        self.max_retries = max_retries
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = session or requests.Session()

    def search(self, term: str, scope: SearchScope = SearchScope.ALL) -> List[Book]:
        """
        Search for books.

        Args:
            term: Non-blank search term
            scope: Fields to match against

        Returns:
            Books in catalog order, duplicates removed

        Raises:
            CatalogLookupError: If the request failed after all retries
        """
        params = {
            "q": build_query(term, scope),
            "maxResults": self.max_results,
            "startIndex": 0
        }

        if self.api_key:
            params["key"] = self.api_key

        payload = self._make_request_with_retry(self.BASE_URL, params)
        return deduplicate_books(parse_books_response(payload))

    def _make_request_with_retry(
        self,
        url: str,
        params: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Make HTTP request with retry logic.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            Response JSON

        Raises:
            CatalogLookupError: On a permanent failure or when retries run out
        """
        last_error = "request failed"

        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")

                response = self.session.get(
                    url,
                    params=params,
                    timeout=self.timeout
                )

                # Handle different status codes
                if response.status_code == 200:
                    logger.info(f"Success: {response.status_code}")
                    try:
                        return response.json()
                    except ValueError as e:
                        raise CatalogLookupError("Malformed response from catalog") from e

                elif response.status_code == 429:
                    # Rate limited - must retry with backoff
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    last_error = "HTTP 429 from catalog"

                elif response.status_code >= 500:
                    # Server error - retryable
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    last_error = f"HTTP {response.status_code} from catalog"

                else:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}): {response.text}")
                    raise CatalogLookupError(f"HTTP {response.status_code} from catalog")

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                last_error = "timeout"

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                last_error = f"Network error: {e}"

            except requests.exceptions.RequestException as e:
                logger.error(f"Unexpected error: {e}")
                raise CatalogLookupError(f"Network error: {e}") from e

            if attempt < self.max_retries - 1:
                self._backoff(attempt)

        logger.error(f"All {self.max_retries} attempts failed")
        raise CatalogLookupError(last_error)

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        # Exponential backoff: base * 2^attempt
        delay = self.base_backoff * (2 ** attempt)

        # Add jitter: random value between 0 and delay
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class ThreadedCatalog:
    """Expose a blocking client through the async lookup port."""

    def __init__(self, client: GoogleBooksClient):
        self.client = client

    async def search(self, term: str, scope: SearchScope = SearchScope.ALL) -> List[Book]:
        # Keep the event loop free while requests blocks
        return await asyncio.to_thread(self.client.search, term, scope)
