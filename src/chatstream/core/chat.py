"""Conversation front end: one user turn, one streamed reply, at a time."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Callable

from chatstream.core.conversation import ConversationError, ConversationLog
from chatstream.stream.session import MalformedObserver, Renderer, StreamSession
from chatstream.transport.http import HttpChunkSource
from chatstream.types.config import ChatConfig
from chatstream.types.messages import (
    ChatMessage,
    ConversationSnapshot,
    Role,
    format_timestamp,
)

logger = logging.getLogger(__name__)

SourceFactory = Callable[[str], AsyncIterable[bytes]]
Clock = Callable[[], str]


class TurnInProgressError(ConversationError):
    """A new prompt was submitted while the previous reply is still streaming."""


class Chat:
    """Owns the conversation log and starts a fresh session per turn.

    Parameters
    ----------
    config:
        Endpoint and message settings.  Defaults to :class:`ChatConfig`.
    source_factory:
        Builds the byte source for a prompt.  Defaults to
        :class:`~chatstream.transport.http.HttpChunkSource`.
    clock:
        Returns the display timestamp for new messages.
    on_malformed:
        Forwarded to every :class:`StreamSession`.
    """

    def __init__(
        self,
        config: ChatConfig | None = None,
        *,
        source_factory: SourceFactory | None = None,
        clock: Clock = format_timestamp,
        on_malformed: MalformedObserver | None = None,
    ) -> None:
        self._config = config or ChatConfig()
        self._source_factory = source_factory or self._http_source
        self._clock = clock
        self._on_malformed = on_malformed
        self._log = ConversationLog()
        self._session: StreamSession | None = None
        self._greet()

    @property
    def config(self) -> ChatConfig:
        return self._config

    @property
    def log(self) -> ConversationLog:
        return self._log

    @property
    def busy(self) -> bool:
        """True while an assistant reply is streaming."""
        return self._log.in_flight is not None

    @property
    def session(self) -> StreamSession | None:
        """The session of the current or most recent turn."""
        return self._session

    def snapshot(self) -> ConversationSnapshot:
        return self._log.snapshot()

    async def send(self, prompt: str, render: Renderer | None = None) -> ChatMessage | None:
        """Send *prompt* and stream the reply, returning the final assistant message.

        Blank prompts are ignored and return ``None``.  Raises
        :class:`TurnInProgressError` if a reply is already streaming.
        """
        if not prompt.strip():
            return None
        if self.busy:
            raise TurnInProgressError("Wait for the current reply to finish")

        self._log.append(ChatMessage(role=Role.USER, content=prompt, timestamp=self._clock()))
        if render is not None:
            render(self._log.snapshot())

        session = StreamSession(
            self._log,
            render,
            encoding=self._config.encoding,
            error_message=self._config.error_message,
            on_malformed=self._on_malformed,
        )
        source = self._source_factory(prompt)
        self._session = session
        session.start(self._clock())
        message = await session.run(source)
        logger.debug("Turn finished as %s", session.state.value)
        return message

    def abort(self) -> None:
        """Abort the streaming reply, if any."""
        if self._session is not None:
            self._session.abort()

    def reset(self) -> None:
        """Forget the conversation and start over with the greeting."""
        self._log.clear()
        self._session = None
        self._greet()

    def _greet(self) -> None:
        if self._config.greeting:
            self._log.append(ChatMessage(
                role=Role.ASSISTANT, content=self._config.greeting, timestamp=self._clock(),
            ))

    def _http_source(self, prompt: str) -> AsyncIterable[bytes]:
        return HttpChunkSource(prompt, self._config)
