"""Results of queue operations and a wrapper that keeps an awaitable's output."""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Any, Awaitable, Generator, Generic, Protocol, TypeVar

from catnip.fail import Fail

T = TypeVar("T")

_PENDING: Any = object()


class _Endpoint(Protocol):
    addr: IPv4Address
    port: Any


class ResultFuture(Generic[T]):
    """Runs an awaitable once and keeps what it produced."""

    def __init__(self, future: Awaitable[T]) -> None:
        self.future = future
        self._done: T = _PENDING

    @property
    def completed(self) -> bool:
        return self._done is not _PENDING

    @property
    def done(self) -> T:
        """The stored output; raises RuntimeError while the awaitable is unfinished."""
        if not self.completed:
            raise RuntimeError("operation has not completed")
        return self._done

    async def run(self) -> None:
        """Await the wrapped awaitable and store its output."""
        if self.completed:
            raise RuntimeError("Polled after completion")
        self._done = await self.future

    def __await__(self) -> Generator[Any, None, None]:
        return self.run().__await__()


class OperationResult:
    """Outcome of a queued socket operation."""

    __slots__ = ()


@dataclass(frozen=True, repr=False)
class ConnectResult(OperationResult):
    def __repr__(self) -> str:
        return "Connect"


@dataclass(frozen=True, repr=False)
class AcceptResult(OperationResult):
    fd: int

    def __repr__(self) -> str:
        return "Accept"


@dataclass(frozen=True, repr=False)
class PushResult(OperationResult):
    def __repr__(self) -> str:
        return "Push"


@dataclass(frozen=True, repr=False)
class PopResult(OperationResult):
    addr: _Endpoint | None
    buf: Any

    def __repr__(self) -> str:
        return "Pop"


@dataclass(frozen=True, repr=False)
class FailedResult(OperationResult):
    error: Fail

    def __repr__(self) -> str:
        return f"Failed({self.error!r})"