"""Debounced, staleness-guarded search orchestration."""
import asyncio
import logging
from typing import AsyncIterator, Optional, Set

from booksearch.models import (
    Empty,
    Error,
    Idle,
    Loading,
    SearchScope,
    SearchState,
    Success,
)
from booksearch.ports import CatalogLookup
from booksearch.stream import StateStream

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5
UNKNOWN_ERROR_MESSAGE = "Unknown error while searching books"


class SearchOrchestrator:
    """
    Turns query edits and scope changes into at most one current lookup.

    All public methods must be called from the event loop thread. Every
    search captures a request id; outcomes whose id is no longer the latest
    are dropped, so a slow earlier lookup can never overwrite a newer state.
    Superseded lookups are left to finish on their own.
    """

    def __init__(
        self,
        catalog: CatalogLookup,
        debounce_interval: float = DEFAULT_DEBOUNCE_SECONDS,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        """
        Args:
            catalog: Lookup port used for every search
            debounce_interval: Quiet period in seconds before typed text is searched
            loop: Event loop for timers and lookup tasks (defaults to the running loop)
        """
        self._catalog = catalog
        self._debounce_interval = debounce_interval
        self._loop = loop
        self._query_text = ""
        self._scope = SearchScope.ALL
        self._request_id = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._stream = StateStream(Idle())

    @property
    def state(self) -> SearchState:
        return self._stream.value

    @property
    def query_text(self) -> str:
        return self._query_text

    @property
    def scope(self) -> SearchScope:
        return self._scope

    def set_query_text(self, text: str) -> None:
        """Record new input; search it once typing pauses."""
        self._query_text = text
        self._invalidate()

        if not text.strip():
            self._publish(Idle())
            return

        self._timer = self._get_loop().call_later(
            self._debounce_interval, self._on_debounce, self._request_id
        )

    def set_scope(self, scope: SearchScope) -> None:
        """Record new scope; search immediately if there is query text."""
        self._scope = scope
        if not self._query_text.strip():
            return
        self._invalidate()
        self._start_search()

    def retry(self) -> None:
        """Re-run the current query and scope without waiting."""
        if not self._query_text.strip():
            return
        self._invalidate()
        self._start_search()

    def clear(self) -> None:
        self._invalidate()
        self._query_text = ""
        self._publish(Idle())

    def observe_state(self) -> AsyncIterator[SearchState]:
        """Current state first, then every transition."""
        return self._stream.subscribe()

    async def aclose(self) -> None:
        """Disarm the timer and cancel outstanding lookups."""
        self._invalidate()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _invalidate(self) -> None:
        # Bumping the id turns any in-flight lookup stale
        self._request_id += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_debounce(self, request_id: int) -> None:
        if request_id != self._request_id:
            return
        self._timer = None
        self._start_search()

    def _start_search(self) -> None:
        query = self._query_text.strip()
        if not query:
            return

        request_id = self._request_id
        scope = self._scope
        self._publish(Loading(query=query, scope=scope))

        task = self._get_loop().create_task(self._run_search(request_id, query, scope))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_search(self, request_id: int, query: str, scope: SearchScope) -> None:
        try:
            books = await self._catalog.search(query, scope)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self._is_stale(request_id, query):
                return
            logger.warning(f"Search failed for '{query}' ({scope.value}): {e}")
            self._publish(Error(message=str(e) or UNKNOWN_ERROR_MESSAGE, query=query, cause=e))
            return

        if self._is_stale(request_id, query):
            return

        if books:
            self._publish(Success(books=tuple(books), query=query, scope=scope))
        else:
            self._publish(Empty(query=query))

    def _is_stale(self, request_id: int, query: str) -> bool:
        if request_id == self._request_id:
            return False
        logger.debug(f"Discarding superseded result for '{query}' (request {request_id})")
        return True

    def _publish(self, state: SearchState) -> None:
        logger.debug(f"State -> {type(state).__name__}")
        self._stream.publish(state)
