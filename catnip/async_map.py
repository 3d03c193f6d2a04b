"""Map from keys to pollable tasks that yields whichever finishes first."""

from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, TypeVar

from catnip.async_slab import Pollable
from catnip.waker_page import PENDING, SharedWaker

K = TypeVar("K", bound=Hashable)
F = TypeVar("F", bound=Pollable)


class FutureMap(Generic[K, F]):
    """Pollable tasks under unique keys."""

    def __init__(self) -> None:
        self._parent = SharedWaker()
        self._futures: dict[K, F] = {}

    def insert(self, key: K, future: F) -> tuple[K, F] | None:
        """Add ``future`` under ``key``; on a collision hand back the pair proposed."""
        if key in self._futures:
            return key, future
        self._futures[key] = future
        self._parent.wake()
        return None

    def get(self, key: K) -> F | None:
        return self._futures.get(key)

    def remove(self, key: K) -> bool:
        """Drop the task under ``key``; report whether there was one."""
        return self._futures.pop(key, None) is not None

    def poll(self, waker: Callable[[], object]) -> tuple[K, Any] | Any:
        """Return ``(key, output)`` of the first finished task, removing it, else PENDING."""
        self._parent.register(waker)
        for key, future in list(self._futures.items()):
            output = future.poll(waker)
            if output is PENDING:
                continue
            del self._futures[key]
            return key, output
        return PENDING

    def __contains__(self, key: object) -> bool:
        return key in self._futures

    def __len__(self) -> int:
        return len(self._futures)