"""Tests for the blocking catalog client."""
from unittest.mock import MagicMock

import pytest
import requests

from booksearch.client import GoogleBooksClient, ThreadedCatalog
from booksearch.models import SearchScope
from booksearch.ports import CatalogLookupError


def _response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = ""
    return response


def _client(*responses, max_retries=3):
    session = MagicMock()
    session.get.side_effect = list(responses)
    client = GoogleBooksClient(session=session, max_retries=max_retries, base_backoff=0)
    return client, session


def test_search_returns_books_for_author_scope():
    payload = {"items": [{"id": "1", "volumeInfo": {"title": "Dune", "authors": ["Frank Herbert"]}}]}
    client, session = _client(_response(200, payload))

    books = client.search("herbert", SearchScope.AUTHOR)

    assert [book.title for book in books] == ["Dune"]
    params = session.get.call_args.kwargs["params"]
    assert params["q"] == "inauthor:herbert"
    assert params["maxResults"] == 40


def test_retries_server_errors_then_succeeds():
    client, session = _client(
        _response(500),
        _response(429),
        _response(200, {"items": [{"id": "1", "volumeInfo": {"title": "Dune"}}]})
    )

    books = client.search("dune")

    assert len(books) == 1
    assert session.get.call_count == 3


def test_client_error_is_not_retried():
    client, session = _client(_response(400), _response(200))

    with pytest.raises(CatalogLookupError, match="HTTP 400"):
        client.search("dune")

    assert session.get.call_count == 1


def test_exhausted_timeouts_raise_timeout():
    client, session = _client(
        requests.exceptions.Timeout(),
        requests.exceptions.Timeout(),
        max_retries=2
    )

    with pytest.raises(CatalogLookupError) as excinfo:
        client.search("dune")

    assert str(excinfo.value) == "timeout"
    assert session.get.call_count == 2


def test_malformed_json_raises_lookup_error():
    response = _response(200)
    response.json.side_effect = ValueError("bad json")
    client, _ = _client(response)

    with pytest.raises(CatalogLookupError, match="Malformed"):
        client.search("dune")


@pytest.mark.asyncio
async def test_threaded_catalog_runs_blocking_client():
    client, _ = _client(_response(200, {"items": [{"id": "1", "volumeInfo": {"title": "Dune"}}]}))

    books = await ThreadedCatalog(client).search("dune", SearchScope.TITLE)

    assert books[0].id == "1"


@pytest.mark.asyncio
async def test_threaded_catalog_propagates_lookup_error():
    client, _ = _client(_response(404))

    with pytest.raises(CatalogLookupError):
        await ThreadedCatalog(client).search("dune")
