"""chatstream: incremental NDJSON chat streaming.

Usage:
    import asyncio
    from chatstream import Chat

    async def main():
        chat = Chat()
        reply = await chat.send("Hello!", render=print)
        print(reply.content)

    asyncio.run(main())
"""

from chatstream.core.chat import Chat, TurnInProgressError
from chatstream.core.conversation import ConversationError, ConversationLog
from chatstream.stream.accumulator import MessageAccumulator
from chatstream.stream.decoder import TextDecoder
from chatstream.stream.lines import LineAssembler
from chatstream.stream.records import RecordParser, parse_record
from chatstream.stream.session import (
    SessionState,
    SessionStateError,
    SessionStats,
    StreamSession,
)
from chatstream.transport.base import ByteChunkSource, TransportError
from chatstream.transport.http import HttpChunkSource
from chatstream.types.config import ChatConfig
from chatstream.types.messages import ChatMessage, ConversationSnapshot, Role
from chatstream.types.records import Delta, Malformed, ParseResult, Skip

__version__ = "0.1.0"

__all__ = [
    # Front end
    "Chat",
    "ChatConfig",
    "TurnInProgressError",
    # Conversation
    "ChatMessage",
    "ConversationError",
    "ConversationLog",
    "ConversationSnapshot",
    "Role",
    # Stream pipeline
    "LineAssembler",
    "MessageAccumulator",
    "RecordParser",
    "SessionState",
    "SessionStateError",
    "SessionStats",
    "StreamSession",
    "TextDecoder",
    "parse_record",
    # Records
    "Delta",
    "Malformed",
    "ParseResult",
    "Skip",
    # Transport
    "ByteChunkSource",
    "HttpChunkSource",
    "TransportError",
]
