"""Byte chunk source protocol and transport errors."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable


class TransportError(Exception):
    """The byte source failed or closed abnormally."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class ByteChunkSource(Protocol):
    """Anything that yields raw response body chunks asynchronously.

    Clean exhaustion of the iterator is the end-of-stream signal; any
    exception raised while iterating is a transport failure.
    """

    def __aiter__(self) -> AsyncIterator[bytes]:
        ...
