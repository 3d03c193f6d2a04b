"""Packet buffers: an immutable sliceable view and a mutable zero-filled buffer."""

from __future__ import annotations

from typing import Iterator

from catnip.fail import Invalid


class Bytes:
    """Immutable view over a window of shared data; equality ignores the window offset."""

    __slots__ = ("_data", "_offset", "_length")

    def __init__(
        self, data: bytes | None = None, offset: int = 0, length: int | None = None
    ) -> None:
        self._data = bytes(data) if data is not None else b""
        if length is None:
            length = len(self._data) - offset
        if offset < 0 or length < 0 or offset + length > len(self._data):
            raise ValueError("window lies outside the buffer")
        self._offset = offset
        self._length = length

    @classmethod
    def empty(cls) -> Bytes:
        """Return an empty buffer."""
        return cls()

    @classmethod
    def from_slice(cls, data: bytes) -> Bytes:
        """Return a buffer holding a copy of ``data``."""
        return cls(bytes(data))

    def adjust(self, n: int) -> None:
        """Drop the first ``n`` bytes."""
        if n > self._length:
            raise ValueError(
                f"Adjusting past end of buffer: {n} vs. {self._length}"
            )
        self._offset += n
        self._length -= n

    def trim(self, n: int) -> None:
        """Drop the last ``n`` bytes."""
        if n > self._length:
            raise ValueError(
                f"Trimming past beginning of buffer: {n} vs. {self._length}"
            )
        self._length -= n

    def to_bytes(self) -> bytes:
        """Return the visible contents."""
        return self._data[self._offset : self._offset + self._length]

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[int]:
        return iter(self.to_bytes())

    def __getitem__(self, index):
        return self.to_bytes()[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Bytes, BytesMut)):
            return self.to_bytes() == bytes(other)
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.to_bytes() == bytes(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        return f"Bytes({list(self.to_bytes())})"


class BytesMut:
    """Mutable, fixed-size buffer that can be frozen into :class:`Bytes`."""

    __slots__ = ("_buf",)

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise Invalid("zero-capacity buffer")
        self._buf = bytearray(capacity)

    @classmethod
    def zeroed(cls, capacity: int) -> BytesMut:
        """Return a buffer of ``capacity`` zero bytes."""
        return cls(capacity)

    @classmethod
    def from_slice(cls, data: bytes) -> BytesMut:
        """Return a buffer holding a copy of ``data``."""
        buf = cls(len(data))
        buf._buf[:] = data
        return buf

    def freeze(self) -> Bytes:
        """Return an immutable copy of the contents."""
        return Bytes(bytes(self._buf))

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __iter__(self) -> Iterator[int]:
        return iter(self._buf)

    def __getitem__(self, index):
        return self._buf[index]

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            start, stop, step = index.indices(len(self._buf))
            if len(range(start, stop, step)) != len(value):
                raise ValueError("slice assignment must keep the buffer size")
        self._buf[index] = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Bytes, BytesMut, bytes, bytearray, memoryview)):
            return bytes(self._buf) == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BytesMut({list(self._buf)})"