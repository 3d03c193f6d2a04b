# catnip

Pure-Python building blocks for a user-space TCP/IP stack: wire formats,
address resolution and the bookkeeping that sits underneath a network
stack. Nothing in the package opens an operating-system socket or touches
a network device. Frames are built and parsed as bytes, and a runtime
that you supply sends them.

## What is included

- `catnip.fail`: the `Fail` exception hierarchy, with classes such as
  `Timeout`, `Malformed`, `Ignored` and `BadFileDescriptor`. Every failure
  maps to a POSIX error number through `Fail.errno()`. Failures of the same
  class with the same details compare equal.
- `catnip.file_table`: `FileTable` maps integer descriptors to a `FileKind`
  (`TCP_SOCKET` or `UDP_SOCKET`). Its methods are `alloc`, `get` and `free`.
  A freed descriptor is handed out again before new ones, and the most
  recently freed is reused first.
- `catnip.log_setup`: `initialize()` sets up the `catnip` logger once. It
  reads the level from the `CATNIP_LOG` environment variable, for example
  `debug` or `catnip=info`, and defaults to errors only.
- `catnip.buffers`: `Bytes` is an immutable view. `adjust(n)` drops bytes
  from the front and `trim(n)` drops bytes from the back. `BytesMut` is a
  fixed-size, zero-filled mutable buffer, and `freeze()` turns it into a
  `Bytes`.
- `catnip.ttl_cache`: `HashTtlCache` is a dictionary whose entries expire
  against a clock that the caller advances with `advance_clock`. Expired
  entries are set aside by `cleanup`. `items()` yields only the entries
  that have not expired.
- `catnip.port`: `Port` is a non-zero 16-bit port number. `EphemeralPorts`
  is a shuffled pool of the private ports from 49152 to 65535.
- `catnip.ethernet`: `MacAddress`, `EtherType2` and `Ethernet2Header`, which
  parse and serialize frame headers.
- `catnip.arp`: `ArpPdu` (parse and serialize), `ArpOptions` (immutable,
  with `with_cache_ttl`, `with_request_timeout` and `with_retry_count`),
  `ArpCache` and `ArpMessage`.
- `catnip.arp_peer`: `ArpPeer` answers ARP requests for the local address
  and learns the addresses of its peers. Its `query()` resolves an address
  by broadcasting requests, retrying up to `retry_count` times, and raises
  `Timeout` when no answer comes. It runs on any object that satisfies the
  `ArpRuntime` protocol: `local_link_addr`, `local_ipv4_addr`, `now()`,
  `wait(duration)` and `transmit(pkt)`.
- `catnip.icmpv4`: `Icmpv4Kind`, `Icmpv4Type2`, `Icmpv4Header` and
  `icmpv4_checksum`.
- `catnip.timeouts`: `with_timeout(future, timer)` races an awaitable
  against a timer and raises `Timeout` if the timer finishes first.
- `catnip.operations` and `catnip.interop`: the operation results
  (`ConnectResult`, `AcceptResult`, `PushResult`, `PopResult` and
  `FailedResult`), and `QResult.pack`, which describes a result with an
  `Opcode`.
- `catnip.waker_page`, `catnip.async_slab`, `catnip.async_map` and
  `catnip.watched`: small cooperative-scheduling primitives. These are
  `WakerPage` and its wakers, `AsyncSlab`, `FutureMap` and `WatchedValue`.

## What it does not do

The package has no IPv4, TCP or UDP layer. It has no socket interface, no
ICMP ping or echo responder, no scheduler that drives these pieces
together, and no command-line program. You wire the parts into your own
runtime.

## Installing

```
pip install .
```

To install the test dependencies as well and run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from catnip.ethernet import Ethernet2Header, EtherType2, MacAddress

header = Ethernet2Header(
    dst_addr=MacAddress.broadcast(),
    src_addr=MacAddress.parse_str("02:00:00:00:00:01"),
    ether_type=EtherType2.ARP,
)
frame = header.serialize() + bytes(28)
parsed, payload = Ethernet2Header.parse(frame)
assert parsed.ether_type is EtherType2.ARP
assert len(payload) == 28
```