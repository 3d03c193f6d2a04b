import asyncio
from collections import deque
from ipaddress import IPv4Address

import pytest

from catnip.arp import ArpOperation, ArpOptions, ArpPdu
from catnip.arp_peer import ArpPeer
from catnip.ethernet import Ethernet2Header, EtherType2, MacAddress
from catnip.fail import Ignored, Malformed, Timeout

ALICE_IPV4 = IPv4Address("192.168.1.1")
ALICE_MAC = MacAddress(bytes.fromhex("020000000001"))
BOB_IPV4 = IPv4Address("192.168.1.2")
BOB_MAC = MacAddress(bytes.fromhex("020000000002"))
CARRIE_IPV4 = IPv4Address("192.168.1.3")
CARRIE_MAC = MacAddress(bytes.fromhex("020000000003"))


def _options(**kwargs):
    values = dict(retry_count=2, request_timeout=1.0, cache_ttl=600.0)
    values.update(kwargs)
    return ArpOptions(**values)


class FakeRuntime:
    def __init__(self, link_addr, ipv4_addr, now=0.0):
        self.local_link_addr = link_addr
        self.local_ipv4_addr = ipv4_addr
        self._now = now
        self._timers = []
        self.frames = deque()

    def now(self):
        return self._now

    def wait(self, duration):
        future = asyncio.get_running_loop().create_future()
        self._timers.append((self._now + duration, future))
        return future

    def advance_clock(self, now):
        self._now = now
        due = [t for t in self._timers if t[0] <= now]
        self._timers = [t for t in self._timers if t[0] > now]
        for _, future in due:
            if not future.done():
                future.set_result(None)

    def transmit(self, pkt):
        self.frames.append(pkt.write_header())

    def pop_frame(self):
        return self.frames.popleft()


def _node(link, ip, options=None):
    rt = FakeRuntime(link, ip)
    return rt, ArpPeer(rt, options if options is not None else _options())


async def _settle():
    for _ in range(20):
        await asyncio.sleep(0)


def _payload(frame):
    _, payload = Ethernet2Header.parse(frame)
    return payload


@pytest.mark.asyncio
async def test_immediate_reply():
    alice_rt, alice = _node(ALICE_MAC, ALICE_IPV4)
    _, bob = _node(BOB_MAC, BOB_IPV4)
    carrie_rt, carrie = _node(CARRIE_MAC, CARRIE_IPV4)
    assert alice.options.request_timeout == 1.0

    task = asyncio.ensure_future(alice.query(CARRIE_IPV4))
    await _settle()
    assert not task.done()

    request = _payload(alice_rt.pop_frame())

    with pytest.raises(Ignored):
        bob.receive(request)
    assert ALICE_IPV4 not in bob.export_cache()

    carrie.receive(request)
    assert carrie.export_cache().get(ALICE_IPV4) == ALICE_MAC

    reply = _payload(carrie_rt.pop_frame())
    alice.receive(reply)
    await _settle()
    assert task.done()
    assert task.result() == CARRIE_MAC


@pytest.mark.asyncio
async def test_slow_reply():
    alice_rt, alice = _node(ALICE_MAC, ALICE_IPV4)
    _, bob = _node(BOB_MAC, BOB_IPV4)
    carrie_rt, carrie = _node(CARRIE_MAC, CARRIE_IPV4)
    assert alice.options.retry_count > 0

    task = asyncio.ensure_future(alice.query(CARRIE_IPV4))
    await _settle()
    alice_rt.advance_clock(1.0)
    await _settle()
    assert not task.done()
    assert len(alice_rt.frames) == 2

    alice_rt.pop_frame()
    request = _payload(alice_rt.pop_frame())

    with pytest.raises(Ignored):
        bob.receive(request)
    assert ALICE_IPV4 not in bob.export_cache()

    carrie.receive(request)
    assert carrie.export_cache().get(ALICE_IPV4) == ALICE_MAC

    alice.receive(_payload(carrie_rt.pop_frame()))
    alice_rt.advance_clock(1.000001)
    await _settle()
    assert task.result() == CARRIE_MAC


@pytest.mark.asyncio
async def test_no_reply():
    alice_rt, alice = _node(ALICE_MAC, ALICE_IPV4)
    options = alice.options
    assert options.retry_count == 2
    assert options.request_timeout == 1.0

    task = asyncio.ensure_future(alice.query(CARRIE_IPV4))
    await _settle()
    assert not task.done()
    pdu = ArpPdu.parse(_payload(alice_rt.pop_frame()))
    assert pdu.operation is ArpOperation.REQUEST

    now = 0.0
    for _ in range(options.retry_count):
        now += options.request_timeout
        alice_rt.advance_clock(now)
        await _settle()
        assert not task.done()
        pdu = ArpPdu.parse(_payload(alice_rt.pop_frame()))
        assert pdu.operation is ArpOperation.REQUEST

    now += options.request_timeout
    alice_rt.advance_clock(now)
    await _settle()
    assert task.done()
    with pytest.raises(Timeout):
        task.result()


@pytest.mark.asyncio
async def test_query_after_timeout_can_be_retried():
    alice_rt, alice = _node(ALICE_MAC, ALICE_IPV4, _options(retry_count=1))
    task = asyncio.ensure_future(alice.query(CARRIE_IPV4))
    await _settle()
    alice_rt.advance_clock(1.0)
    await _settle()
    alice_rt.advance_clock(2.0)
    await _settle()
    with pytest.raises(Timeout):
        task.result()

    second = asyncio.ensure_future(alice.query(CARRIE_IPV4))
    await _settle()
    assert not second.done()
    second.cancel()
    await _settle()
    assert second.cancelled()


@pytest.mark.asyncio
async def test_query_cached_address_sends_nothing():
    alice_rt, alice = _node(
        ALICE_MAC, ALICE_IPV4, _options(initial_values={CARRIE_IPV4: CARRIE_MAC})
    )
    assert await alice.query(CARRIE_IPV4) == CARRIE_MAC
    assert len(alice_rt.frames) == 0


def test_request_produces_reply_frame():
    carrie_rt, carrie = _node(CARRIE_MAC, CARRIE_IPV4)
    request = ArpPdu(
        ArpOperation.REQUEST, ALICE_MAC, ALICE_IPV4, MacAddress.broadcast(), CARRIE_IPV4
    )
    carrie.receive(request.serialize())

    header, payload = Ethernet2Header.parse(carrie_rt.pop_frame())
    assert header.dst_addr == ALICE_MAC
    assert header.src_addr == CARRIE_MAC
    assert header.ether_type is EtherType2.ARP
    reply = ArpPdu.parse(payload)
    assert reply.operation is ArpOperation.REPLY
    assert reply.sender_hardware_addr == CARRIE_MAC
    assert reply.sender_protocol_addr == CARRIE_IPV4
    assert reply.target_hardware_addr == ALICE_MAC
    assert reply.target_protocol_addr == ALICE_IPV4


def test_reply_is_cached_without_answer():
    alice_rt, alice = _node(ALICE_MAC, ALICE_IPV4)
    reply = ArpPdu(ArpOperation.REPLY, CARRIE_MAC, CARRIE_IPV4, ALICE_MAC, ALICE_IPV4)
    alice.receive(reply.serialize())
    assert alice.try_query(CARRIE_IPV4) == CARRIE_MAC
    assert len(alice_rt.frames) == 0


def test_known_sender_is_merged_even_if_not_target():
    new_mac = MacAddress(bytes.fromhex("020000000009"))
    alice_rt, alice = _node(
        ALICE_MAC, ALICE_IPV4, _options(initial_values={CARRIE_IPV4: CARRIE_MAC})
    )
    pdu = ArpPdu(
        ArpOperation.REQUEST, new_mac, CARRIE_IPV4, MacAddress.broadcast(), BOB_IPV4
    )
    assert alice.receive(pdu.serialize()) is None
    assert alice.try_query(CARRIE_IPV4) == new_mac
    assert len(alice_rt.frames) == 0


def test_receive_malformed():
    _, alice = _node(ALICE_MAC, ALICE_IPV4)
    with pytest.raises(Malformed):
        alice.receive(bytes(10))


def test_try_query_unknown_and_disabled():
    _, alice = _node(ALICE_MAC, ALICE_IPV4)
    assert alice.try_query(CARRIE_IPV4) is None
    _, blind = _node(ALICE_MAC, ALICE_IPV4, _options(disable_arp=True))
    assert blind.try_query(CARRIE_IPV4) == MacAddress.nil()


@pytest.mark.asyncio
async def test_background_expires_entries():
    carrie_rt, carrie = _node(CARRIE_MAC, CARRIE_IPV4, _options(cache_ttl=1.0))
    request = ArpPdu(
        ArpOperation.REQUEST, ALICE_MAC, ALICE_IPV4, MacAddress.broadcast(), CARRIE_IPV4
    )
    carrie.receive(request.serialize())
    assert carrie.export_cache() == {ALICE_IPV4: ALICE_MAC}

    carrie_rt.advance_clock(2.0)
    task = asyncio.ensure_future(carrie.background())
    await _settle()
    assert carrie.export_cache() == {}
    task.cancel()
    await _settle()
    assert task.cancelled()