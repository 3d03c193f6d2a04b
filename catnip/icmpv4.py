"""ICMPv4 message types and headers."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from catnip.buffers import Bytes
from catnip.fail import Malformed

MAX_ICMPV4_DATAGRAM_SIZE = 576
ICMPV4_HEADER_SIZE = 8

_WORD = struct.Struct("!H")
_ECHO = struct.Struct("!HH")


class Icmpv4Kind(enum.IntEnum):
    """ICMPv4 type byte values."""

    ECHO_REPLY = 0
    DESTINATION_UNREACHABLE = 3
    SOURCE_QUENCH = 4
    REDIRECT_MESSAGE = 5
    ECHO_REQUEST = 8
    ROUTER_ADVERTISEMENT = 9
    ROUTER_SOLICITATION = 10
    TIME_EXCEEDED = 11
    BAD_IP_HEADER = 12
    TIMESTAMP = 13
    TIMESTAMP_REPLY = 14


_ECHO_KINDS = frozenset({Icmpv4Kind.ECHO_REPLY, Icmpv4Kind.ECHO_REQUEST})


@dataclass(frozen=True)
class Icmpv4Type2:
    """A message type; echo messages also carry an identifier and a sequence number."""

    kind: Icmpv4Kind
    id: int = 0
    seq_num: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", Icmpv4Kind(self.kind))
        for value in (self.id, self.seq_num):
            if not 0 <= value <= 0xFFFF:
                raise ValueError("identifier and sequence number must fit in 16 bits")
        if self.kind not in _ECHO_KINDS and (self.id or self.seq_num):
            raise ValueError(f"{self.kind.name} carries no identifier or sequence number")

    @classmethod
    def parse(cls, type_byte: int, rest_of_header: bytes) -> Icmpv4Type2:
        """Decode the type byte and the four bytes that follow the checksum."""
        rest = bytes(rest_of_header)
        if len(rest) != 4:
            raise ValueError("rest of header must be four bytes")
        try:
            kind = Icmpv4Kind(type_byte)
        except ValueError:
            raise Malformed("Invalid type byte") from None
        if kind in _ECHO_KINDS:
            ident, seq_num = _ECHO.unpack(rest)
            return cls(kind, ident, seq_num)
        return cls(kind)

    def serialize(self) -> tuple[int, bytes]:
        """Return the type byte and the four bytes that follow the checksum."""
        if self.kind in _ECHO_KINDS:
            return int(self.kind), _ECHO.pack(self.id, self.seq_num)
        return int(self.kind), bytes(4)


def icmpv4_checksum(header: bytes, body: bytes = b"") -> int:
    """Checksum over an 8-byte header (its checksum field skipped) and a body."""
    header = bytes(header)
    if len(header) != ICMPV4_HEADER_SIZE:
        raise ValueError("ICMPv4 header must be eight bytes")
    body = bytes(body)
    if len(body) % 2:
        body += b"\x00"
    state = 0xFFFF
    state += _WORD.unpack_from(header, 0)[0]
    state += _WORD.unpack_from(header, 4)[0]
    state += _WORD.unpack_from(header, 6)[0]
    state += sum(word for (word,) in _WORD.iter_unpack(body))
    while state > 0xFFFF:
        state -= 0xFFFF
    return ~state & 0xFFFF


@dataclass(frozen=True)
class Icmpv4Header:
    """Type and code of an ICMPv4 message."""

    icmpv4_type: Icmpv4Type2
    code: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.code <= 0xFF:
            raise ValueError("code must fit in one byte")

    def size(self) -> int:
        return ICMPV4_HEADER_SIZE

    @classmethod
    def parse(cls, buf) -> tuple[Icmpv4Header, Bytes]:
        """Split a datagram into its checked header and the body that follows it."""
        data = bytes(buf)
        if len(data) < ICMPV4_HEADER_SIZE:
            raise Malformed("ICMPv4 datagram too small for header")
        header = data[:ICMPV4_HEADER_SIZE]
        (checksum,) = _WORD.unpack_from(header, 2)
        if checksum != icmpv4_checksum(header, data[ICMPV4_HEADER_SIZE:]):
            raise Malformed("ICMPv4 checksum mismatch")
        icmpv4_type = Icmpv4Type2.parse(header[0], header[4:8])
        return cls(icmpv4_type, header[1]), Bytes(data, ICMPV4_HEADER_SIZE)

    def serialize(self) -> bytes:
        """Return the header's wire form, checksummed over the header alone."""
        type_byte, rest = self.icmpv4_type.serialize()
        header = bytes([type_byte, self.code, 0, 0]) + rest
        checksum = icmpv4_checksum(header)
        return header[:2] + _WORD.pack(checksum) + header[4:]