"""Ordered conversation log with a single in-flight assistant slot."""

from __future__ import annotations

from chatstream.types.messages import (
    ChatMessage,
    ConversationSnapshot,
    Role,
    format_timestamp,
)


class ConversationError(RuntimeError):
    """The log was asked to do something that breaks the in-flight invariant."""


class ConversationLog:
    """Chronological list of finalized messages plus at most one in-flight reply.

    The in-flight message lives in its own slot rather than at the end of
    the list, so it cannot be confused with a finalized message.  Snapshots
    always place it last.
    """

    def __init__(self, messages: list[ChatMessage] | None = None) -> None:
        self._messages: list[ChatMessage] = list(messages or [])
        self._in_flight: ChatMessage | None = None

    # ------------------------------------------------------------------
    # Finalized messages
    # ------------------------------------------------------------------

    def append(self, message: ChatMessage) -> None:
        """Append an already-final message (e.g. the user's prompt)."""
        if self._in_flight is not None:
            raise ConversationError("Cannot append while a reply is in flight")
        self._messages.append(message)

    def clear(self) -> None:
        if self._in_flight is not None:
            raise ConversationError("Cannot clear while a reply is in flight")
        self._messages.clear()

    @property
    def messages(self) -> list[ChatMessage]:
        """Finalized messages only."""
        return list(self._messages)

    # ------------------------------------------------------------------
    # In-flight slot
    # ------------------------------------------------------------------

    @property
    def in_flight(self) -> ChatMessage | None:
        return self._in_flight

    def begin_turn(self, timestamp: str | None = None) -> ChatMessage:
        """Open the in-flight slot with an empty assistant message."""
        if self._in_flight is not None:
            raise ConversationError("A reply is already in flight")
        self._in_flight = ChatMessage(
            role=Role.ASSISTANT,
            content="",
            timestamp=timestamp if timestamp is not None else format_timestamp(),
        )
        return self._in_flight

    def update_in_flight(self, content: str) -> ChatMessage:
        """Replace the in-flight message with one carrying *content*."""
        if self._in_flight is None:
            raise ConversationError("No reply is in flight")
        self._in_flight = self._in_flight.with_content(content)
        return self._in_flight

    def finalize(self, content: str | None = None) -> ChatMessage:
        """Move the in-flight message into the log, optionally replacing its content."""
        if self._in_flight is None:
            raise ConversationError("No reply is in flight")
        message = self._in_flight
        if content is not None:
            message = message.with_content(content)
        self._in_flight = None
        self._messages.append(message)
        return message

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def snapshot(self) -> ConversationSnapshot:
        if self._in_flight is None:
            return ConversationSnapshot(messages=tuple(self._messages))
        return ConversationSnapshot(
            messages=(*self._messages, self._in_flight), in_flight=True,
        )

    def __len__(self) -> int:
        return len(self._messages) + (1 if self._in_flight is not None else 0)
