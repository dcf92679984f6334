"""Chat message and conversation snapshot types."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

TIMESTAMP_FORMAT = "%I:%M %p"


class Role(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


def format_timestamp(when: datetime | None = None) -> str:
    """Format a wall-clock time the way messages display it (``"09:41 AM"``)."""
    return (when or datetime.now()).strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A single message in the conversation log."""

    role: Role
    content: str = ""
    timestamp: str = ""

    def with_content(self, content: str) -> ChatMessage:
        """Return a copy of this message carrying *content*."""
        return replace(self, content=content)


@dataclass(frozen=True, slots=True)
class ConversationSnapshot:
    """Immutable view of the conversation log at one point in time.

    When ``in_flight`` is true the last message is the assistant reply
    currently receiving deltas; every other message is final.
    """

    messages: tuple[ChatMessage, ...] = ()
    in_flight: bool = False

    @property
    def last(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.messages)

    def __getitem__(self, index: int) -> ChatMessage:
        return self.messages[index]
