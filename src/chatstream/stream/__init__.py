"""Incremental NDJSON stream decoding and message accumulation."""

from chatstream.stream.accumulator import MessageAccumulator
from chatstream.stream.decoder import TextDecoder
from chatstream.stream.lines import LineAssembler
from chatstream.stream.records import RecordParser, parse_record
from chatstream.stream.session import (
    Renderer,
    SessionState,
    SessionStateError,
    SessionStats,
    StreamSession,
)

__all__ = [
    "LineAssembler",
    "MessageAccumulator",
    "RecordParser",
    "Renderer",
    "SessionState",
    "SessionStateError",
    "SessionStats",
    "StreamSession",
    "TextDecoder",
    "parse_record",
]
