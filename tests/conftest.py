"""Test fixtures including scripted byte sources for deterministic streams."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest

from chatstream.core.conversation import ConversationLog
from chatstream.types.messages import ConversationSnapshot


def ndjson_line(content: Any, **extra: Any) -> str:
    """One NDJSON record carrying *content* as ``message.content``."""
    record = {"model": "llama3", "message": {"role": "assistant", "content": content}}
    record.update(extra)
    return json.dumps(record) + "\n"


class ScriptedSource:
    """A deterministic byte source for testing.

    Usage:
        source = ScriptedSource([b'{"message": {"content": "Hi"}}\\n'])
        source = ScriptedSource(chunks, error=ConnectionError("reset"))

    Yields *chunks* in order, then raises *error* if one is given.
    """

    def __init__(self, chunks: list[bytes], error: BaseException | None = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.yielded = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            for chunk in self._chunks:
                self.yielded += 1
                yield chunk
            if self._error is not None:
                raise self._error
        finally:
            self.closed = True


class RecordingRenderer:
    """Renderer that keeps every snapshot it receives."""

    def __init__(self) -> None:
        self.snapshots: list[ConversationSnapshot] = []

    def __call__(self, snapshot: ConversationSnapshot) -> None:
        self.snapshots.append(snapshot)

    @property
    def reply_contents(self) -> list[str]:
        """Content of the last message in each snapshot."""
        return [s.last.content if s.last else "" for s in self.snapshots]

    @property
    def in_flight_flags(self) -> list[bool]:
        return [s.in_flight for s in self.snapshots]


@pytest.fixture
def log() -> ConversationLog:
    return ConversationLog()


@pytest.fixture
def recorder() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def make_line() -> Callable[..., str]:
    return ndjson_line


@pytest.fixture
def make_source() -> Callable[..., ScriptedSource]:
    return ScriptedSource


@pytest.fixture
def chat_body() -> bytes:
    """A realistic three-delta response body ending with a done record."""
    return "".join([
        ndjson_line("Hel"),
        ndjson_line("lo"),
        ndjson_line(" world"),
        ndjson_line("", done=True, done_reason="stop"),
    ]).encode("utf-8")
