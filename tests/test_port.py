import random

import pytest

from catnip.fail import OutOfRange, ResourceExhausted
from catnip.port import EphemeralPorts, Port


def test_zero_port_is_rejected():
    with pytest.raises(OutOfRange) as info:
        Port(0)
    assert info.value.details == "port number may not be zero"


def test_too_large_port_is_rejected():
    with pytest.raises(OutOfRange):
        Port(65536)


def test_port_roundtrips_to_int():
    assert int(Port(1234)) == 1234
    assert str(Port(1234)) == "1234"
    assert Port(1234) == Port(1234)
    assert Port(1234) < Port(1235)


def test_first_private_port():
    port = Port.first_private_port()
    assert int(port) == 49152
    assert port.is_private()


def test_is_private_boundary():
    assert not Port(49151).is_private()
    assert Port(49152).is_private()
    assert Port(65535).is_private()


def test_pool_hands_out_every_private_port_once():
    pool = EphemeralPorts(random.Random(0))
    taken = [pool.alloc() for _ in range(len(pool))]
    assert {int(p) for p in taken} == set(range(49152, 65536))
    assert len(taken) == len(set(taken))
    assert all(p.is_private() for p in taken)
    with pytest.raises(ResourceExhausted):
        pool.alloc()


def test_freed_port_is_allocated_again():
    pool = EphemeralPorts(random.Random(1))
    port = pool.alloc()
    size = len(pool)
    pool.free(port)
    assert len(pool) == size + 1
    assert pool.alloc() == port


def test_same_seed_gives_same_order():
    a = EphemeralPorts(random.Random(42))
    b = EphemeralPorts(random.Random(42))
    assert [a.alloc() for _ in range(5)] == [b.alloc() for _ in range(5)]