"""Table that maps file descriptors to the kind of socket they refer to."""

from __future__ import annotations

import enum


class FileKind(enum.Enum):
    """Kinds of files a descriptor may refer to."""

    TCP_SOCKET = enum.auto()
    UDP_SOCKET = enum.auto()


class FileTable:
    """Descriptor table that reuses the most recently freed slot first."""

    def __init__(self) -> None:
        self._entries: list[FileKind | None] = []
        self._vacant: list[int] = []

    def alloc(self, file: FileKind) -> int:
        """Store ``file`` and return the descriptor that now refers to it."""
        if self._vacant:
            fd = self._vacant.pop()
            self._entries[fd] = file
            return fd
        self._entries.append(file)
        return len(self._entries) - 1

    def get(self, fd: int) -> FileKind | None:
        """Return the file behind ``fd``, or None if the descriptor is not open."""
        if 0 <= fd < len(self._entries):
            return self._entries[fd]
        return None

    def free(self, fd: int) -> FileKind | None:
        """Release ``fd``, returning the file it referred to, or None if not open."""
        file = self.get(fd)
        if file is None:
            return None
        self._entries[fd] = None
        self._vacant.append(fd)
        return file

    def __contains__(self, fd: object) -> bool:
        return isinstance(fd, int) and self.get(fd) is not None

    def __len__(self) -> int:
        return len(self._entries) - len(self._vacant)