"""Failures raised by the network stack, each carrying a POSIX error number."""

from __future__ import annotations

import errno as _errno
from typing import ClassVar


class Fail(Exception):
    """Base class of every failure the stack reports."""

    template: ClassVar[str] = "failure"
    code: ClassVar[int] = _errno.EINVAL

    def __init__(self, details: str | None = None) -> None:
        self.details = details
        super().__init__(self.template.format(details=details))

    def errno(self) -> int:
        """Return the POSIX error number that corresponds to this failure."""
        return self.code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fail):
            return NotImplemented
        return type(self) is type(other) and self.details == other.details

    def __hash__(self) -> int:
        return hash((type(self), self.details))

    def __repr__(self) -> str:
        if self.details is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}(details={self.details!r})"


class ConnectionAborted(Fail):
    template = "connection aborted"
    code = _errno.ECONNABORTED


class ConnectionRefused(Fail):
    template = "connection refused"
    code = _errno.ECONNREFUSED


class IoFailure(Fail):
    template = "IO Error"
    code = _errno.EIO


class BorrowMutFailure(Fail):
    template = "BorrowMut Error"
    code = _errno.EINVAL


class Ignored(Fail):
    template = "operation had no effect ({details})"
    code = 0


class Malformed(Fail):
    template = "encountered a malformed datagram ({details})"
    code = _errno.EILSEQ


class Misdelivered(Fail):
    template = "misdelivered datagram"
    code = _errno.EHOSTUNREACH


class OutOfRange(Fail):
    template = "a value is out of range ({details})"
    code = _errno.ERANGE


class ResourceBusy(Fail):
    template = "resource is busy ({details})"
    code = _errno.EBUSY


class ResourceExhausted(Fail):
    template = "resource exhausted ({details})"
    code = _errno.ENOMEM


class ResourceNotFound(Fail):
    template = "resource not found ({details})"
    code = _errno.ENOENT


class Timeout(Fail):
    template = "an asynchronous operation timed out"
    code = _errno.ETIMEDOUT


class TypeMismatch(Fail):
    template = "type mismatch ({details})"
    code = _errno.EPERM


class Unsupported(Fail):
    template = "unsupported ({details})"
    code = _errno.ENOTSUP


class Invalid(Fail):
    template = "invalid ({details})"
    code = _errno.EINVAL


class TooManyOpenedFiles(Fail):
    template = "too many opened files ({details})"
    code = _errno.EMFILE


class AddressInUse(Fail):
    template = "address in use"
    code = _errno.EADDRINUSE


class AddressNotAvailable(Fail):
    template = "address not available"
    code = _errno.EADDRNOTAVAIL


class AddressFamilySupport(Fail):
    template = "address family not supported"
    code = _errno.EAFNOSUPPORT


class SocketTypeSupport(Fail):
    template = "socket type not supported"
    code = _errno.ESOCKTNOSUPPORT


class BadFileDescriptor(Fail):
    template = "bad file descriptor"
    code = _errno.EBADF