"""Fold text deltas into the in-flight assistant message."""

from __future__ import annotations

from chatstream.core.conversation import ConversationError, ConversationLog
from chatstream.types.messages import ChatMessage, ConversationSnapshot


class MessageAccumulator:
    """Owns the growing text of one assistant turn.

    Every :meth:`append` produces exactly one snapshot, in call order.
    The accumulated text is dropped once the turn is finalized.
    """

    def __init__(self, log: ConversationLog) -> None:
        self._log = log
        self._current = ""
        self._active = False

    @property
    def text(self) -> str:
        """Text accumulated so far in the current turn."""
        return self._current

    @property
    def active(self) -> bool:
        return self._active

    def start(self, timestamp: str | None = None) -> ConversationSnapshot:
        """Open a turn: add an empty in-flight message and reset the text."""
        self._log.begin_turn(timestamp)
        self._current = ""
        self._active = True
        return self._log.snapshot()

    def append(self, delta: str) -> ConversationSnapshot:
        """Extend the in-flight message by *delta* and return a snapshot."""
        if not self._active:
            raise ConversationError("No turn is open")
        text = self._current + delta
        self._log.update_in_flight(text)
        snapshot = self._log.snapshot()
        self._current = text
        return snapshot

    def finish(self) -> ChatMessage:
        """Finalize the in-flight message with the accumulated text."""
        return self._close(None)

    def fail(self, error_message: str) -> ChatMessage:
        """Finalize the in-flight message with *error_message* instead of its text."""
        return self._close(error_message)

    def _close(self, content: str | None) -> ChatMessage:
        if not self._active:
            raise ConversationError("No turn is open")
        message = self._log.finalize(content)
        self._current = ""
        self._active = False
        return message
