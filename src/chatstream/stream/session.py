"""Per-turn state machine wiring decoder, framing, parsing and accumulation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from chatstream.core.conversation import ConversationLog
from chatstream.stream.accumulator import MessageAccumulator
from chatstream.stream.decoder import TextDecoder
from chatstream.stream.lines import LineAssembler
from chatstream.stream.records import RecordParser
from chatstream.types.config import DEFAULT_ERROR_MESSAGE
from chatstream.types.messages import ChatMessage, ConversationSnapshot
from chatstream.types.records import Delta, Malformed, Skip

logger = logging.getLogger(__name__)

Renderer = Callable[[ConversationSnapshot], None]
MalformedObserver = Callable[[Malformed], None]


class SessionState(Enum):
    """Lifecycle of one streamed assistant turn."""

    IDLE = "idle"
    OPEN = "open"
    CLOSED = "closed"  # terminal, clean end of stream
    FAILED = "failed"  # terminal, transport failure or abort


class SessionStateError(RuntimeError):
    """An operation was attempted in a state that does not allow it."""


@dataclass(slots=True)
class SessionStats:
    """Counters for one session, useful for diagnostics."""

    chunks: int = 0
    bytes: int = 0
    lines: int = 0
    deltas: int = 0
    skipped: int = 0
    malformed: int = 0


def _current_task() -> asyncio.Task[object] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class StreamSession:
    """Drives a single assistant turn from raw bytes to finalized message.

    ``IDLE -> OPEN`` on :meth:`start`, ``OPEN -> CLOSED`` on :meth:`close`,
    ``OPEN -> FAILED`` on :meth:`fail` or :meth:`abort`.  The renderer is
    called with a snapshot after the turn starts, after every delta, and
    once more when the turn ends.

    A session is single-use: start a new one for every turn.

    Parameters
    ----------
    log:
        Conversation the in-flight reply is added to.
    render:
        Called synchronously with each :class:`ConversationSnapshot`.
    source:
        Default byte source used by :meth:`run`.
    encoding:
        Text encoding of the response body.
    error_message:
        Content that replaces the reply when the turn fails.
    on_malformed:
        Observer for lines that could not be parsed.  They are skipped
        either way.
    """

    def __init__(
        self,
        log: ConversationLog,
        render: Renderer | None = None,
        *,
        source: AsyncIterable[bytes] | None = None,
        encoding: str = "utf-8",
        error_message: str = DEFAULT_ERROR_MESSAGE,
        parser: RecordParser | None = None,
        on_malformed: MalformedObserver | None = None,
    ) -> None:
        self._log = log
        self._render = render
        self._source = source
        self._error_message = error_message
        self._parser = parser or RecordParser()
        self._on_malformed = on_malformed

        self._decoder = TextDecoder(encoding)
        self._lines = LineAssembler()
        self._accumulator = MessageAccumulator(log)

        self._state = SessionState.IDLE
        self._stats = SessionStats()
        self._message: ChatMessage | None = None
        self._error: BaseException | None = None
        self._aborted = False
        self._task: asyncio.Task[object] | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def stats(self) -> SessionStats:
        return self._stats

    @property
    def message(self) -> ChatMessage | None:
        """The finalized reply, once the session is CLOSED or FAILED."""
        return self._message

    @property
    def error(self) -> BaseException | None:
        """The transport failure that ended the turn, if any."""
        return self._error

    @property
    def text(self) -> str:
        """Text accumulated so far while OPEN."""
        return self._accumulator.text

    # ------------------------------------------------------------------
    # Synchronous driving
    # ------------------------------------------------------------------

    def start(self, timestamp: str | None = None) -> ConversationSnapshot:
        """Open the turn and emit the snapshot with the empty reply."""
        if self._state is not SessionState.IDLE:
            raise SessionStateError(f"Cannot start a session that is {self._state.value}")
        snapshot = self._accumulator.start(timestamp)
        self._state = SessionState.OPEN
        logger.debug("Stream session opened")
        self._emit(snapshot)
        return snapshot

    def feed(self, chunk: bytes) -> None:
        """Push one raw chunk through the pipeline."""
        self._require_open("feed")
        self._stats.chunks += 1
        self._stats.bytes += len(chunk)
        self._consume(self._lines.push(self._decoder.feed(chunk)))

    def close(self) -> ChatMessage:
        """Handle clean end of stream: flush buffers and finalize the reply."""
        self._require_open("close")
        self._consume(self._lines.push(self._decoder.finish()))
        final_line = self._lines.finish()
        if final_line is not None:
            self._consume((final_line,))
        if self._state is not SessionState.OPEN:
            return self._finished_message()
        message = self._accumulator.finish()
        return self._terminate(SessionState.CLOSED, message)

    def fail(self, error: BaseException | None = None) -> ChatMessage:
        """Handle a transport failure: replace the reply with the error message."""
        self._require_open("fail")
        self._error = error
        message = self._accumulator.fail(self._error_message)
        return self._terminate(SessionState.FAILED, message)

    def abort(self) -> None:
        """Cancel the turn; treated exactly like a transport failure.

        If :meth:`run` is active in another task, that task is cancelled
        and :meth:`run` returns the failed message instead of raising.
        """
        if self._state is not SessionState.OPEN:
            return
        self._aborted = True
        logger.debug("Stream session aborted")
        self.fail()
        task = self._task
        if task is not None and task is not _current_task():
            task.cancel()

    # ------------------------------------------------------------------
    # Asynchronous driving
    # ------------------------------------------------------------------

    async def run(self, source: AsyncIterable[bytes] | None = None) -> ChatMessage:
        """Consume *source* until it ends or fails and return the final reply.

        Exceptions raised by the source become a FAILED turn.  Exceptions
        raised by the renderer propagate after the turn is failed without
        a further render.
        """
        source = source if source is not None else self._source
        if source is None:
            raise ValueError("No byte source given")
        if self._state is SessionState.IDLE:
            self.start()
        self._require_open("run")

        self._task = _current_task()
        iterator = aiter(source)
        try:
            while self._state is SessionState.OPEN:
                try:
                    chunk = await anext(iterator)
                except StopAsyncIteration:
                    return self.close()
                except Exception as exc:
                    logger.warning("Stream transport failed (%s): %s", type(exc).__name__, exc)
                    return self.fail(exc)
                self.feed(chunk)
            return self._finished_message()
        except asyncio.CancelledError:
            if self._aborted:
                task = _current_task()
                if task is not None:
                    task.uncancel()
                return self._finished_message()
            if self._state is SessionState.OPEN:
                self.fail()
            raise
        except BaseException as exc:
            if self._state is SessionState.OPEN:
                self._error = exc
                message = self._accumulator.fail(self._error_message)
                self._terminate(SessionState.FAILED, message, emit=False)
            raise
        finally:
            self._task = None
            await self._close_iterator(iterator)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _consume(self, lines: Iterable[str]) -> None:
        for line in lines:
            if self._state is not SessionState.OPEN:
                return
            self._stats.lines += 1
            result = self._parser.parse(line)
            match result:
                case Delta(text=text):
                    self._stats.deltas += 1
                    self._emit(self._accumulator.append(text))
                case Malformed(raw=raw, reason=reason):
                    self._stats.malformed += 1
                    logger.warning("Skipping malformed stream line (%s): %.200r", reason, raw)
                    if self._on_malformed is not None:
                        self._on_malformed(result)
                case Skip():
                    self._stats.skipped += 1

    def _terminate(
        self, state: SessionState, message: ChatMessage, *, emit: bool = True,
    ) -> ChatMessage:
        self._state = state
        self._message = message
        logger.debug(
            "Stream session %s after %d chunks, %d deltas, %d malformed lines",
            state.value, self._stats.chunks, self._stats.deltas, self._stats.malformed,
        )
        if emit:
            self._emit(self._log.snapshot())
        return message

    def _finished_message(self) -> ChatMessage:
        if self._message is None:
            raise SessionStateError("Session ended without a final message")
        return self._message

    def _emit(self, snapshot: ConversationSnapshot) -> None:
        if self._render is not None:
            self._render(snapshot)

    def _require_open(self, operation: str) -> None:
        if self._state is not SessionState.OPEN:
            raise SessionStateError(
                f"Cannot {operation} a session that is {self._state.value}",
            )

    @staticmethod
    async def _close_iterator(iterator: object) -> None:
        aclose = getattr(iterator, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as exc:
            logger.debug("Error closing byte source: %s", exc)
