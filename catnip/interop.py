"""Plain records that describe completed queue operations to callers."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from ipaddress import IPv4Address

from catnip.fail import Invalid
from catnip.operations import (
    AcceptResult,
    ConnectResult,
    FailedResult,
    OperationResult,
    PopResult,
    PushResult,
)

logger = logging.getLogger(__name__)

SGARRAY_MAXSIZE = 1


class Opcode(enum.IntEnum):
    INVALID = 0
    PUSH = 1
    POP = 2
    ACCEPT = 3
    CONNECT = 4
    FAILED = 5


@dataclass
class ScatterGatherArray:
    """Data segments together with the peer address they came from."""

    segments: list[bytes] = field(default_factory=list)
    sin_addr: IPv4Address = IPv4Address(0)
    sin_port: int = 0

    def __post_init__(self) -> None:
        if len(self.segments) > SGARRAY_MAXSIZE:
            raise Invalid("too many segments")
        self.segments = [bytes(segment) for segment in self.segments]

    @property
    def num_segs(self) -> int:
        return len(self.segments)

    def to_bytes(self) -> bytes:
        """Return all segments joined together."""
        return b"".join(self.segments)

    def __len__(self) -> int:
        return sum(len(segment) for segment in self.segments)


@dataclass
class AcceptInfo:
    """The descriptor of a newly accepted connection."""

    qd: int
    sin_addr: IPv4Address = IPv4Address(0)
    sin_port: int = 0


@dataclass
class QResult:
    """What a completed operation reports: its kind, descriptor, token and value."""

    opcode: Opcode
    qd: int
    qt: int
    value: ScatterGatherArray | AcceptInfo | None = None

    @classmethod
    def pack(cls, result: OperationResult, qd: int, qt: int) -> QResult:
        """Describe ``result`` of the operation ``qt`` on descriptor ``qd``."""
        if isinstance(result, ConnectResult):
            return cls(Opcode.CONNECT, qd, qt)
        if isinstance(result, AcceptResult):
            return cls(Opcode.ACCEPT, qd, qt, AcceptInfo(result.fd))
        if isinstance(result, PushResult):
            return cls(Opcode.PUSH, qd, qt)
        if isinstance(result, PopResult):
            sga = ScatterGatherArray([bytes(result.buf)])
            if result.addr is not None:
                sga.sin_port = int(result.addr.port)
                sga.sin_addr = IPv4Address(result.addr.addr)
            return cls(Opcode.POP, qd, qt, sga)
        if isinstance(result, FailedResult):
            logger.warning("Operation Failed: %r", result.error)
            return cls(Opcode.FAILED, qd, qt)
        raise TypeError(f"unknown operation result: {result!r}")