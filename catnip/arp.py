"""ARP protocol data units, messages, options and the address cache."""

from __future__ import annotations

import dataclasses
import enum
import struct
from dataclasses import dataclass, field
from ipaddress import IPv4Address

from catnip.ethernet import Ethernet2Header, MacAddress
from catnip.fail import Malformed, Unsupported
from catnip.ttl_cache import HashTtlCache

ARP_HTYPE_ETHER2 = 1
ARP_HLEN_ETHER2 = 6
ARP_PTYPE_IPV4 = 0x800
ARP_PLEN_IPV4 = 4
ARP_MESSAGE_SIZE = 28

_LAYOUT = struct.Struct("!HHBBH6s4s6s4s")

DUMMY_MAC_ADDRESS = MacAddress(bytes(6))


class ArpOperation(enum.IntEnum):
    REQUEST = 1
    REPLY = 2


@dataclass
class ArpPdu:
    """An ARP message for Ethernet hardware and IPv4 addresses."""

    operation: ArpOperation
    sender_hardware_addr: MacAddress
    sender_protocol_addr: IPv4Address
    target_hardware_addr: MacAddress
    target_protocol_addr: IPv4Address

    @classmethod
    def parse(cls, buf) -> ArpPdu:
        data = bytes(buf)
        if len(data) < ARP_MESSAGE_SIZE:
            raise Malformed("ARP message too short")
        htype, ptype, hlen, plen, oper, sha, spa, tha, tpa = _LAYOUT.unpack_from(data)
        if htype != ARP_HTYPE_ETHER2:
            raise Unsupported("Unsupported HTYPE")
        if ptype != ARP_PTYPE_IPV4:
            raise Unsupported("Unsupported PTYPE")
        if hlen != ARP_HLEN_ETHER2:
            raise Unsupported("Unsupported HLEN")
        if plen != ARP_PLEN_IPV4:
            raise Unsupported("Unsupported PLEN")
        try:
            operation = ArpOperation(oper)
        except ValueError:
            raise Unsupported("Unsupported OPER") from None
        return cls(
            operation,
            MacAddress(sha),
            IPv4Address(spa),
            MacAddress(tha),
            IPv4Address(tpa),
        )

    def serialize(self) -> bytes:
        return _LAYOUT.pack(
            ARP_HTYPE_ETHER2,
            ARP_PTYPE_IPV4,
            ARP_HLEN_ETHER2,
            ARP_PLEN_IPV4,
            self.operation,
            self.sender_hardware_addr.octets(),
            self.sender_protocol_addr.packed,
            self.target_hardware_addr.octets(),
            self.target_protocol_addr.packed,
        )

    def compute_size(self) -> int:
        return ARP_MESSAGE_SIZE


@dataclass(frozen=True)
class ArpOptions:
    """Tunables of the ARP peer; durations are in seconds."""

    cache_ttl: float = 15.0
    request_timeout: float = 20.0
    retry_count: int = 5
    initial_values: dict[IPv4Address, MacAddress] = field(default_factory=dict)
    disable_arp: bool = False

    def with_cache_ttl(self, value: float) -> ArpOptions:
        if value <= 0:
            raise ValueError("cache TTL must be positive")
        return dataclasses.replace(self, cache_ttl=value)

    def with_request_timeout(self, value: float) -> ArpOptions:
        if value <= 0:
            raise ValueError("request timeout must be positive")
        return dataclasses.replace(self, request_timeout=value)

    def with_retry_count(self, value: int) -> ArpOptions:
        if value <= 0:
            raise ValueError("retry count must be positive")
        return dataclasses.replace(self, retry_count=value)


class ArpCache:
    """IPv4-to-link address resolutions with expiry."""

    def __init__(
        self,
        now: float,
        default_ttl: float | None,
        values: dict[IPv4Address, MacAddress] | None = None,
        disable: bool = False,
    ) -> None:
        self._cache: HashTtlCache[IPv4Address, MacAddress] = HashTtlCache(
            now, default_ttl
        )
        self._disable = disable
        for ipv4_addr, link_addr in (values or {}).items():
            self.insert(ipv4_addr, link_addr)

    def export(self) -> dict[IPv4Address, MacAddress]:
        """Return every resolution that has not expired."""
        return dict(self._cache.items())

    def insert(self, ipv4_addr: IPv4Address, link_addr: MacAddress) -> MacAddress | None:
        """Cache a resolution, returning the link address it replaced, if any."""
        return self._cache.insert(ipv4_addr, link_addr)

    def get(self, ipv4_addr: IPv4Address) -> MacAddress | None:
        if self._disable:
            return DUMMY_MAC_ADDRESS
        return self._cache.get(ipv4_addr)

    def advance_clock(self, now: float) -> None:
        self._cache.advance_clock(now)

    def clear(self) -> None:
        self._cache.clear()


@dataclass
class ArpMessage:
    """An Ethernet frame carrying an ARP PDU."""

    ethernet2_hdr: Ethernet2Header
    arp_pdu: ArpPdu
    _body: bytes | None = field(default=None, init=False, repr=False, compare=False)

    def header_size(self) -> int:
        return self.ethernet2_hdr.compute_size() + self.arp_pdu.compute_size()

    def body_size(self) -> int:
        return 0

    def write_header(self) -> bytes:
        return self.ethernet2_hdr.serialize() + self.arp_pdu.serialize()

    def take_body(self) -> bytes | None:
        """Hand over the body, if any; an ARP frame never carries one."""
        body, self._body = self._body, None
        return body