"""Pages of 64 task-state bits, and the wakers that set them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Final

WAKER_PAGE_SIZE: Final = 64


class _Pending:
    __slots__ = ()

    def __repr__(self) -> str:
        return "PENDING"


PENDING: Final = _Pending()
"""Returned by ``poll`` methods while their work has not finished."""


def _bit(ix: int) -> int:
    if not 0 <= ix < WAKER_PAGE_SIZE:
        raise ValueError(f"index {ix} lies outside a page of {WAKER_PAGE_SIZE}")
    return 1 << ix


class SharedWaker:
    """Slot for one wake-up callback; waking consumes the registered callback."""

    def __init__(self) -> None:
        self._callback: Callable[[], object] | None = None

    def register(self, callback: Callable[[], object]) -> None:
        """Make ``callback`` the one called by the next :meth:`wake`."""
        self._callback = callback

    def wake(self) -> None:
        """Call and forget the registered callback, if there is one."""
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


@dataclass(frozen=True)
class Waker:
    """Wakes one task slot of a page."""

    page: WakerPage
    index: int

    def wake(self) -> None:
        self.page.notify(self.index)

    def __call__(self) -> None:
        self.wake()


class WakerPage:
    """Notified, completed and dropped flags for 64 tasks, one bit per task."""

    def __init__(self, waker: SharedWaker | None = None) -> None:
        self._notified = 0
        self._completed = 0
        self._dropped = 0
        self._waker = waker if waker is not None else SharedWaker()

    def waker(self, ix: int) -> Waker:
        """Return a waker for task ``ix`` of this page."""
        _bit(ix)
        return Waker(self, ix)

    def notify(self, ix: int) -> None:
        """Flag task ``ix`` as ready to be polled and wake the page's owner."""
        self._notified |= _bit(ix)
        self._waker.wake()

    def take_notified(self) -> int:
        """Return and reset the notified bits, leaving out completed and dropped tasks."""
        notified, self._notified = self._notified, 0
        return notified & ~self._completed & ~self._dropped

    def has_completed(self, ix: int) -> bool:
        return bool(self._completed & _bit(ix))

    def mark_completed(self, ix: int) -> None:
        self._completed |= _bit(ix)

    def mark_dropped(self, ix: int) -> None:
        self._dropped |= _bit(ix)
        self._waker.wake()

    def take_dropped(self) -> int:
        """Return and reset the dropped bits."""
        dropped, self._dropped = self._dropped, 0
        return dropped

    def was_dropped(self, ix: int) -> bool:
        return bool(self._dropped & _bit(ix))

    def initialize(self, ix: int) -> None:
        """Prepare slot ``ix`` for a new task, flagged to be polled first time round."""
        bit = _bit(ix)
        self._notified |= bit
        self._completed &= ~bit
        self._dropped &= ~bit

    def clear(self, ix: int) -> None:
        """Reset every flag of slot ``ix``."""
        mask = ~_bit(ix)
        self._notified &= mask
        self._completed &= mask
        self._dropped &= mask