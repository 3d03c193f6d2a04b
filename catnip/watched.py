"""A value whose changes can be waited for."""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Callable, Generator, Generic, TypeVar

from catnip.waker_page import PENDING

T = TypeVar("T")


class _WatchState(enum.Enum):
    UNREGISTERED = enum.auto()
    REGISTERED = enum.auto()
    COMPLETED = enum.auto()
    CONSUMED = enum.auto()


class _WatchFuture:
    """Finishes once the watched value is next changed with notification."""

    def __init__(self, watched: WatchedValue[Any]) -> None:
        self._watched = watched
        self._waker: Callable[[], object] | None = None
        self._state = _WatchState.UNREGISTERED

    def poll(self, waker: Callable[[], object]) -> Any:
        """Return None once the value has changed, else PENDING and keep ``waker``."""
        if self._state is _WatchState.UNREGISTERED:
            self._waker = waker
            self._state = _WatchState.REGISTERED
            self._watched._waiters.append(self)
            return PENDING
        if self._state is _WatchState.REGISTERED:
            self._waker = waker
            return PENDING
        self._state = _WatchState.CONSUMED
        return None

    def is_terminated(self) -> bool:
        return self._state is _WatchState.CONSUMED

    def cancel(self) -> None:
        """Stop waiting; a later poll registers afresh."""
        if self._state is _WatchState.REGISTERED:
            self._watched._waiters.remove(self)
            self._waker = None
            self._state = _WatchState.UNREGISTERED

    def _complete(self) -> None:
        waker, self._waker = self._waker, None
        self._state = _WatchState.COMPLETED
        if waker is not None:
            waker()

    def __await__(self) -> Generator[Any, None, None]:
        loop = asyncio.get_running_loop()
        try:
            while True:
                signal = loop.create_future()

                def wake(s: asyncio.Future = signal) -> None:
                    if not s.done():
                        s.set_result(None)

                if self.poll(wake) is not PENDING:
                    return None
                yield from signal
        except BaseException:
            self.cancel()
            raise


class WatchedValue(Generic[T]):
    """Holds a value and wakes every watcher when it is changed."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._waiters: list[_WatchFuture] = []

    def set(self, new_value: T) -> None:
        self.modify(lambda _: new_value)

    def set_without_notify(self, new_value: T) -> None:
        self._value = new_value

    def modify(self, f: Callable[[T], T]) -> None:
        """Replace the value with ``f(value)`` and complete every waiting watcher."""
        self._value = f(self._value)
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter._complete()

    def get(self) -> T:
        return self._value

    def watch(self) -> tuple[T, _WatchFuture]:
        """Return the current value and a future that finishes on the next change."""
        return self._value, _WatchFuture(self)

    def __repr__(self) -> str:
        return f"WatchedValue({self._value!r})"