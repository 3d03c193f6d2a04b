"""Ethernet II link addresses and frame headers."""

from __future__ import annotations

import enum
import string
import struct
from dataclasses import dataclass

from catnip.buffers import Bytes
from catnip.fail import Invalid, Malformed, Unsupported

MIN_PAYLOAD_SIZE = 46
ETHERNET2_HEADER_SIZE = 14
MAC_ADDRESS_SIZE = 6

_ETHER_TYPE = struct.Struct("!H")


def _bad_mac() -> Invalid:
    return Invalid("Failed to parse MAC Address")


@dataclass(frozen=True)
class MacAddress:
    """A 48-bit link-layer address."""

    raw: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != MAC_ADDRESS_SIZE:
            raise _bad_mac()
        object.__setattr__(self, "raw", raw)

    @classmethod
    def parse_str(cls, s: str) -> MacAddress:
        """Parse hyphen, colon or dot separated hex notation, or twelve bare hex digits."""
        text = s.strip()
        digits: str | None = None
        if len(text) == 17 and text[2] in "-:":
            parts = text.split(text[2])
            if len(parts) == 6 and all(len(part) == 2 for part in parts):
                digits = "".join(parts)
        elif len(text) == 14 and text[4] == ".":
            parts = text.split(".")
            if len(parts) == 3 and all(len(part) == 4 for part in parts):
                digits = "".join(parts)
        elif len(text) == 12:
            digits = text
        if digits is None or not all(c in string.hexdigits for c in digits):
            raise _bad_mac()
        return cls(bytes.fromhex(digits))

    @classmethod
    def from_bytes(cls, data: bytes) -> MacAddress:
        """Build an address from exactly six bytes."""
        return cls(bytes(data))

    @classmethod
    def broadcast(cls) -> MacAddress:
        """Return the all-ones broadcast address."""
        return cls(b"\xff" * MAC_ADDRESS_SIZE)

    @classmethod
    def nil(cls) -> MacAddress:
        """Return the all-zeros address."""
        return cls(bytes(MAC_ADDRESS_SIZE))

    def is_nil(self) -> bool:
        return all(b == 0 for b in self.raw)

    def is_broadcast(self) -> bool:
        return all(b == 0xFF for b in self.raw)

    def is_unicast(self) -> bool:
        return self.raw[0] & 0x01 == 0

    def to_canonical(self) -> str:
        """Return the hyphen-separated lower-case form."""
        return "-".join(f"{b:02x}" for b in self.raw)

    def octets(self) -> bytes:
        return self.raw

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self.raw)

    def __repr__(self) -> str:
        return f"MacAddress({self.to_canonical()})"


class EtherType2(enum.IntEnum):
    """Payload protocols carried in an Ethernet II frame."""

    ARP = 0x806
    IPV4 = 0x800


@dataclass
class Ethernet2Header:
    """Destination, source and EtherType of an Ethernet II frame."""

    dst_addr: MacAddress
    src_addr: MacAddress
    ether_type: EtherType2

    @classmethod
    def parse(cls, buf) -> tuple[Ethernet2Header, Bytes]:
        """Split a frame into its header and the payload that follows it."""
        data = bytes(buf)
        if len(data) < ETHERNET2_HEADER_SIZE:
            raise Malformed("Frame too small")
        (value,) = _ETHER_TYPE.unpack_from(data, 12)
        try:
            ether_type = EtherType2(value)
        except ValueError:
            raise Unsupported("Unsupported ETHERTYPE") from None
        header = cls(MacAddress(data[0:6]), MacAddress(data[6:12]), ether_type)
        return header, Bytes(data, ETHERNET2_HEADER_SIZE)

    def serialize(self) -> bytes:
        """Return the header's wire form."""
        return (
            self.dst_addr.octets()
            + self.src_addr.octets()
            + _ETHER_TYPE.pack(self.ether_type)
        )

    def compute_size(self) -> int:
        return ETHERNET2_HEADER_SIZE