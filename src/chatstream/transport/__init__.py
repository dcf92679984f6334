"""Byte sources feeding the stream decoder."""

from chatstream.transport.base import ByteChunkSource, TransportError
from chatstream.transport.http import HttpChunkSource

__all__ = ["ByteChunkSource", "HttpChunkSource", "TransportError"]
