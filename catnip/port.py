"""Transport-layer port numbers and the pool of ephemeral ports."""

from __future__ import annotations

import random
from dataclasses import dataclass

from catnip.fail import OutOfRange, ResourceExhausted

FIRST_PRIVATE_PORT = 49152
LAST_PORT = 65535


@dataclass(frozen=True, order=True)
class Port:
    """A non-zero 16-bit port number."""

    number: int

    def __post_init__(self) -> None:
        if self.number == 0:
            raise OutOfRange("port number may not be zero")
        if not 0 < self.number <= LAST_PORT:
            raise OutOfRange("port number does not fit in 16 bits")

    @classmethod
    def first_private_port(cls) -> Port:
        """Return the lowest port of the dynamic (private) range."""
        return cls(FIRST_PRIVATE_PORT)

    def is_private(self) -> bool:
        """Whether the port lies in the dynamic (private) range."""
        return self.number >= FIRST_PRIVATE_PORT

    def __int__(self) -> int:
        return self.number

    def __index__(self) -> int:
        return self.number

    def __str__(self) -> str:
        return str(self.number)


class EphemeralPorts:
    """Pool of the private ports, handed out in random order."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._ports = [Port(p) for p in range(FIRST_PRIVATE_PORT, LAST_PORT + 1)]
        (rng or random.Random()).shuffle(self._ports)

    def alloc(self) -> Port:
        """Take a port from the pool."""
        if not self._ports:
            raise ResourceExhausted("Out of private ports")
        return self._ports.pop()

    def free(self, port: Port) -> None:
        """Return a port to the pool."""
        self._ports.append(port)

    def __len__(self) -> int:
        return len(self._ports)