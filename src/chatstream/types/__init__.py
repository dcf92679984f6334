"""Type definitions for chatstream."""

from chatstream.types.config import ChatConfig
from chatstream.types.messages import (
    ChatMessage,
    ConversationSnapshot,
    Role,
    format_timestamp,
)
from chatstream.types.records import Delta, Malformed, ParseResult, Skip

__all__ = [
    "ChatConfig",
    "ChatMessage",
    "ConversationSnapshot",
    "Delta",
    "Malformed",
    "ParseResult",
    "Role",
    "Skip",
    "format_timestamp",
]
