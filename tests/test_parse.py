"""Tests for parsing functions."""
from booksearch.parse import parse_book, parse_books_response, deduplicate_books
from booksearch.models import Book


def test_parse_book_complete():
    """Test parsing a book with all fields present."""
    item = {
        "id": "abc123",
        "volumeInfo": {
            "title": "Dune",
            "subtitle": "Deluxe Edition",
            "authors": ["Frank Herbert"],
            "publisher": "Ace",
            "publishedDate": "1965-08-01",
            "description": "A desert planet",
            "pageCount": 604,
            "categories": ["Fiction"],
            "language": "en",
            "imageLinks": {
                "thumbnail": "http://example.com/thumb.jpg",
                "smallThumbnail": "http://example.com/small.jpg"
            },
            "previewLink": "http://example.com/preview",
            "infoLink": "http://example.com/info"
        }
    }

    book = parse_book(item)

    assert book is not None
    assert book.id == "abc123"
    assert book.title == "Dune"
    assert book.subtitle == "Deluxe Edition"
    assert book.authors == ("Frank Herbert",)
    assert book.publisher == "Ace"
    assert book.page_count == 604
    assert book.image_url == "http://example.com/thumb.jpg"
    assert book.preview_link == "http://example.com/preview"
    assert book.info_link == "http://example.com/info"


def test_parse_book_missing_fields():
    """Test parsing a book with missing optional fields."""
    item = {
        "id": "xyz789",
        "volumeInfo": {
            "title": "Mystery Book"
        }
    }

    book = parse_book(item)

    assert book is not None
    assert book.id == "xyz789"
    assert book.title == "Mystery Book"
    assert book.authors == ()
    assert book.description is None
    assert book.page_count is None
    assert book.image_url is None
    assert not book.has_image


def test_parse_book_no_id():
    """Test that book without ID returns None."""
    item = {
        "volumeInfo": {
            "title": "No ID Book"
        }
    }

    book = parse_book(item)
    assert book is None


def test_parse_book_rejects_negative_page_count():
    book = parse_book({"id": "1", "volumeInfo": {"title": "T", "pageCount": -3}})
    assert book.page_count is None


def test_parse_book_falls_back_to_small_thumbnail():
    item = {
        "id": "1",
        "volumeInfo": {
            "title": "T",
            "imageLinks": {"smallThumbnail": "http://example.com/small.jpg"}
        }
    }

    book = parse_book(item)

    assert book.image_url == "http://example.com/small.jpg"
    assert book.has_image


def test_parse_book_ignores_non_list_authors_and_categories():
    item = {
        "id": "1",
        "volumeInfo": {
            "title": "T",
            "authors": "Frank Herbert",
            "categories": ["Fiction", 7, None]
        }
    }

    book = parse_book(item)

    assert book.authors == ()
    assert book.categories == ("Fiction",)


def test_parse_book_malformed_item_returns_none():
    assert parse_book("not a dict") is None


def test_parse_books_response():
    """Test parsing complete API response."""
    response = {
        "items": [
            {
                "id": "1",
                "volumeInfo": {"title": "Book 1"}
            },
            {
                "id": "2",
                "volumeInfo": {"title": "Book 2"}
            }
        ]
    }

    books = parse_books_response(response)

    assert len(books) == 2
    assert books[0].title == "Book 1"
    assert books[1].title == "Book 2"


def test_parse_books_response_without_items():
    assert parse_books_response({"kind": "books#volumes", "totalItems": 0}) == []


def test_deduplicate_books():
    """Test deduplication by book ID."""
    books = [
        Book("1", "Book A"),
        Book("2", "Book B"),
        Book("1", "Book A Duplicate"),
    ]

    unique = deduplicate_books(books)

    assert len(unique) == 2
    assert unique[0].id == "1"
    assert unique[0].title == "Book A"
    assert unique[1].id == "2"


def test_book_derived_fields():
    book = Book("1", "Dune", authors=("Frank Herbert", "Brian Herbert"), published_date="1965-08-01")

    assert book.primary_author == "Frank Herbert"
    assert book.authors_str == "Frank Herbert, Brian Herbert"
    assert book.categories_str == "None"
    assert book.published_year == 1965


def test_book_published_year_unparseable():
    assert Book("1", "T", published_date="c. 1900").published_year is None
    assert Book("1", "T", published_date="19").published_year is None
    assert Book("1", "T").primary_author == "Unknown author"
