"""ARP peer: answers requests for the local address and resolves remote ones."""

from __future__ import annotations

import asyncio
import logging
from ipaddress import IPv4Address
from typing import Awaitable, Protocol

from catnip.arp import ArpCache, ArpMessage, ArpOperation, ArpOptions, ArpPdu
from catnip.ethernet import Ethernet2Header, EtherType2, MacAddress
from catnip.fail import Ignored, Timeout
from catnip.timeouts import with_timeout

logger = logging.getLogger(__name__)

BACKGROUND_INTERVAL = 1.0
"""Seconds between two clock updates of the cache by the background task."""


class ArpRuntime(Protocol):
    """What the ARP peer needs from the runtime it sits on."""

    local_link_addr: MacAddress
    local_ipv4_addr: IPv4Address

    def now(self) -> float:
        """Current time in seconds."""

    def wait(self, duration: float) -> Awaitable[object]:
        """Awaitable that finishes once ``duration`` seconds have passed."""

    def transmit(self, pkt: ArpMessage) -> None:
        """Send a frame."""


class ArpPeer:
    """Resolves IPv4 addresses to link addresses and replies to ARP requests."""

    def __init__(self, rt: ArpRuntime, options: ArpOptions | None = None) -> None:
        self._rt = rt
        self._options = options if options is not None else ArpOptions()
        self._cache = ArpCache(
            rt.now(),
            self._options.cache_ttl,
            self._options.initial_values,
            self._options.disable_arp,
        )
        self._waiters: dict[IPv4Address, asyncio.Future[MacAddress]] = {}

    @property
    def options(self) -> ArpOptions:
        return self._options

    def _insert(self, ipv4_addr: IPv4Address, link_addr: MacAddress) -> MacAddress | None:
        waiter = self._waiters.pop(ipv4_addr, None)
        if waiter is not None and not waiter.done():
            waiter.set_result(link_addr)
        return self._cache.insert(ipv4_addr, link_addr)

    def _wait_link_addr(self, ipv4_addr: IPv4Address) -> asyncio.Future[MacAddress]:
        future: asyncio.Future[MacAddress] = asyncio.get_running_loop().create_future()
        link_addr = self._cache.get(ipv4_addr)
        if link_addr is not None:
            future.set_result(link_addr)
        else:
            if ipv4_addr in self._waiters:
                raise RuntimeError(f"Duplicate waiter for {ipv4_addr}")
            self._waiters[ipv4_addr] = future
        return future

    async def background(self) -> None:
        """Keep the cache's clock up to date; runs until cancelled."""
        while True:
            self._cache.advance_clock(self._rt.now())
            await self._rt.wait(BACKGROUND_INTERVAL)

    def receive(self, buf) -> None:
        """Handle an ARP PDU; raises Ignored if it concerned neither us nor a known peer."""
        pdu = ArpPdu.parse(buf)
        logger.debug("Received %r", pdu)

        merge_flag = False
        if self._cache.get(pdu.sender_protocol_addr) is not None:
            self._insert(pdu.sender_protocol_addr, pdu.sender_hardware_addr)
            merge_flag = True

        if pdu.target_protocol_addr != self._rt.local_ipv4_addr:
            if merge_flag:
                return
            raise Ignored("unrecognized IP address")

        if not merge_flag:
            self._insert(pdu.sender_protocol_addr, pdu.sender_hardware_addr)

        if pdu.operation is ArpOperation.REQUEST:
            reply = ArpMessage(
                Ethernet2Header(
                    pdu.sender_hardware_addr,
                    self._rt.local_link_addr,
                    EtherType2.ARP,
                ),
                ArpPdu(
                    ArpOperation.REPLY,
                    self._rt.local_link_addr,
                    self._rt.local_ipv4_addr,
                    pdu.sender_hardware_addr,
                    pdu.sender_protocol_addr,
                ),
            )
            logger.debug("Responding %r", reply)
            self._rt.transmit(reply)
        else:
            logger.debug(
                "reply from `%s/%s`", pdu.sender_protocol_addr, pdu.sender_hardware_addr
            )
            self._cache.insert(pdu.sender_protocol_addr, pdu.sender_hardware_addr)

    def try_query(self, ipv4_addr) -> MacAddress | None:
        """Return the cached link address of ``ipv4_addr`` without asking the network."""
        return self._cache.get(IPv4Address(ipv4_addr))

    async def query(self, ipv4_addr) -> MacAddress:
        """Resolve ``ipv4_addr``, broadcasting requests; raises Timeout if none is answered."""
        ipv4_addr = IPv4Address(ipv4_addr)
        link_addr = self._cache.get(ipv4_addr)
        if link_addr is not None:
            return link_addr

        msg = ArpMessage(
            Ethernet2Header(
                MacAddress.broadcast(), self._rt.local_link_addr, EtherType2.ARP
            ),
            ArpPdu(
                ArpOperation.REQUEST,
                self._rt.local_link_addr,
                self._rt.local_ipv4_addr,
                MacAddress.broadcast(),
                ipv4_addr,
            ),
        )
        response = self._wait_link_addr(ipv4_addr)
        try:
            for attempt in range(self._options.retry_count + 1):
                self._rt.transmit(msg)
                timer = self._rt.wait(self._options.request_timeout)
                try:
                    link_addr = await with_timeout(response, timer)
                except Timeout:
                    logger.warning("ARP request timeout; attempt %d.", attempt + 1)
                    continue
                logger.debug("ARP result available (%s)", link_addr)
                return link_addr
            raise Timeout()
        finally:
            if self._waiters.get(ipv4_addr) is response:
                del self._waiters[ipv4_addr]

    def export_cache(self) -> dict[IPv4Address, MacAddress]:
        """Return every resolution in the cache that has not expired."""
        return self._cache.export()