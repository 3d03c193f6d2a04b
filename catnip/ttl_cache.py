"""Hash map whose entries may expire after a time-to-live."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Hashable, Iterator, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class _Record(Generic[V]):
    value: V
    expiration: float | None

    def has_expired(self, now: float) -> bool:
        return self.expiration is not None and now >= self.expiration


class HashTtlCache(Generic[K, V]):
    """Cache with its own clock; times and TTLs are in seconds, a TTL of None never expires."""

    def __init__(self, now: float, default_ttl: float | None) -> None:
        if default_ttl is not None and default_ttl <= 0:
            raise ValueError("default TTL must be positive")
        self._map: dict[K, _Record[V]] = {}
        self._graveyard: dict[K, V] = {}
        self._default_ttl = default_ttl
        self._clock = now

    def clear(self) -> None:
        """Remove every entry, living or dead."""
        self._graveyard.clear()
        self._map.clear()

    def advance_clock(self, now: float) -> None:
        """Move the cache's clock forward to ``now``."""
        if now < self._clock:
            raise ValueError("clock may not move backwards")
        self._clock = now

    def insert_with_ttl(self, key: K, value: V, ttl: float | None) -> V | None:
        """Store ``value`` under ``key`` and return the value it replaced, if any."""
        expiration = None
        if ttl is not None:
            if ttl <= 0:
                raise ValueError("TTL must be positive")
            expiration = self._clock + ttl
        self.cleanup()
        old = self._map.get(key)
        self._map[key] = _Record(value, expiration)
        return old.value if old is not None else None

    def insert(self, key: K, value: V) -> V | None:
        """Store ``value`` under ``key`` with the default TTL."""
        return self.insert_with_ttl(key, value, self._default_ttl)

    def get(self, key: K) -> V | None:
        """Return the value stored under ``key`` until it has been cleaned up."""
        record = self._map.get(key)
        return record.value if record is not None else None

    def items(self) -> Iterator[tuple[K, V]]:
        """Yield the key and value of every entry that has not expired."""
        clock = self._clock
        for key, record in self._map.items():
            if not record.has_expired(clock):
                yield key, record.value

    def cleanup(self) -> None:
        """Move expired entries out of the cache."""
        dead = [k for k, r in self._map.items() if r.has_expired(self._clock)]
        for key in dead:
            self._graveyard[key] = self._map.pop(key).value