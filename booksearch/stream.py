"""Replay-latest publish/subscribe stream for state snapshots."""
import asyncio
from typing import AsyncIterator, Generic, Set, TypeVar

T = TypeVar("T")


class StateStream(Generic[T]):
    """
    Holds the latest value and pushes every new one to subscribers.

    Each subscriber gets the current value first, then all later values
    in publication order. Subscribers own an unbounded queue so a slow
    reader never blocks the publisher.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: Set[asyncio.Queue] = set()

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, value: T) -> None:
        self._value = value
        for queue in self._subscribers:
            queue.put_nowait(value)

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the current value, then every published value, forever."""
        queue: asyncio.Queue = asyncio.Queue()
        queue.put_nowait(self._value)
        self._subscribers.add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._subscribers.discard(queue)
