"""Slab of pollable tasks whose readiness is tracked in waker pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Protocol

from catnip.waker_page import PENDING, WAKER_PAGE_SIZE, SharedWaker, WakerPage


class Pollable(Protocol):
    def poll(self, waker: Callable[[], object]) -> Any:
        """Return the output, or PENDING after arranging for ``waker`` to be called."""


def iter_set_bits(bitset: int) -> Iterator[int]:
    """Yield the positions of the set bits of ``bitset``, lowest first."""
    if bitset < 0:
        raise ValueError("bitset must not be negative")
    while bitset:
        lowest = bitset & -bitset
        yield lowest.bit_length() - 1
        bitset ^= lowest


@dataclass
class _Slot:
    future: Pollable
    output: Any = PENDING


class AsyncSlab:
    """Keyed pollable tasks; only tasks whose wakers fired are polled again."""

    def __init__(self) -> None:
        self._slots: list[_Slot | None] = []
        self._vacant: list[int] = []
        self._pages: list[WakerPage] = []
        self._root_waker = SharedWaker()

    def _page(self, key: int) -> tuple[WakerPage, int]:
        return self._pages[key // WAKER_PAGE_SIZE], key % WAKER_PAGE_SIZE

    def insert(self, item: Pollable) -> int:
        """Add a task and return its key; it is polled on the next :meth:`poll`."""
        slot = _Slot(item)
        if self._vacant:
            key = self._vacant.pop()
            self._slots[key] = slot
        else:
            key = len(self._slots)
            self._slots.append(slot)
        while key >= len(self._pages) * WAKER_PAGE_SIZE:
            self._pages.append(WakerPage(self._root_waker))
        page, sub = self._page(key)
        page.initialize(sub)
        return key

    def check_ready(self, ix: int) -> Any:
        """Remove and return the output of task ``ix``, or PENDING if it is unfinished."""
        if not 0 <= ix < len(self._slots) or self._slots[ix] is None:
            raise KeyError(ix)
        page, sub = self._page(ix)
        if not page.has_completed(sub):
            return PENDING
        slot = self._slots[ix]
        if slot.output is PENDING:
            raise RuntimeError("Ready bitset and slab inconsistent")
        self._slots[ix] = None
        self._vacant.append(ix)
        page.clear(sub)
        return slot.output

    def poll(self, waker: Callable[[], object]) -> None:
        """Poll every notified task; ``waker`` is called when one is notified again."""
        self._root_waker.register(waker)
        for page_ix, page in enumerate(self._pages):
            for sub in iter_set_bits(page.take_notified()):
                ix = page_ix * WAKER_PAGE_SIZE + sub
                slot = self._slots[ix] if ix < len(self._slots) else None
                if slot is None:
                    continue
                result = slot.future.poll(page.waker(sub))
                if result is not PENDING:
                    slot.output = result
                    page.mark_completed(sub)

    def __len__(self) -> int:
        return len(self._slots) - len(self._vacant)

    def __contains__(self, ix: object) -> bool:
        return (
            isinstance(ix, int)
            and 0 <= ix < len(self._slots)
            and self._slots[ix] is not None
        )