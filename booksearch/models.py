"""Data models for books and search state."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Book:
    """Normalized book representation."""
    id: str
    title: str
    subtitle: Optional[str] = None
    authors: Tuple[str, ...] = ()
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None
    page_count: Optional[int] = None
    categories: Tuple[str, ...] = ()
    language: Optional[str] = None
    thumbnail: Optional[str] = None
    small_thumbnail: Optional[str] = None
    preview_link: Optional[str] = None
    info_link: Optional[str] = None

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.authors) if self.authors else "Unknown"

    @property
    def categories_str(self) -> str:
        """Format categories as comma-separated string."""
        return ", ".join(self.categories) if self.categories else "None"

    @property
    def primary_author(self) -> str:
        return self.authors[0] if self.authors else "Unknown author"

    @property
    def image_url(self) -> Optional[str]:
        """Preferred cover image (thumbnail, then small thumbnail)."""
        return self.thumbnail or self.small_thumbnail

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    @property
    def published_year(self) -> Optional[int]:
        """Year taken from the first four characters of the date."""
        if not self.published_date or len(self.published_date) < 4:
            return None
        try:
            return int(self.published_date[:4])
        except ValueError:
            return None


class SearchScope(Enum):
    """Which catalog fields a query is matched against."""
    ALL = "all"
    TITLE = "title"
    AUTHOR = "author"


@dataclass(frozen=True)
class Idle:
    """No query text entered."""


@dataclass(frozen=True)
class Loading:
    """A lookup is in flight for this query/scope pair."""
    query: str
    scope: SearchScope


@dataclass(frozen=True)
class Success:
    """Lookup returned at least one book."""
    books: Tuple[Book, ...]
    query: str
    scope: SearchScope


@dataclass(frozen=True)
class Empty:
    """Lookup returned no books."""
    query: str

    @property
    def message(self) -> str:
        return f"No books found for: {self.query}"


@dataclass(frozen=True)
class Error:
    """Lookup failed."""
    message: str
    query: str
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)


SearchState = Union[Idle, Loading, Success, Empty, Error]
