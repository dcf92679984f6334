"""Translate conversation snapshots into incremental render operations."""

from __future__ import annotations

from dataclasses import dataclass

from chatstream.types.messages import ChatMessage, ConversationSnapshot


@dataclass(frozen=True, slots=True)
class MessageShown:
    """A complete message that was never streamed (prompt, greeting)."""

    message: ChatMessage


@dataclass(frozen=True, slots=True)
class ReplyStarted:
    """An in-flight reply appeared."""

    message: ChatMessage


@dataclass(frozen=True, slots=True)
class ReplyText:
    """Text to append to the reply currently on screen."""

    text: str


@dataclass(frozen=True, slots=True)
class ReplyFinished:
    """The streamed reply was finalized.

    ``replaced`` is true when the final content does not extend what was
    already shown, i.e. the reply was overwritten by an error message.
    """

    message: ChatMessage
    replaced: bool = False


RenderOp = MessageShown | ReplyStarted | ReplyText | ReplyFinished


class StreamTracker:
    """Remembers what has been drawn so each snapshot only adds the difference.

    When *error_message* is given, a reply finalized with exactly that
    content is reported as replaced even if nothing was shown before it.
    """

    def __init__(self, error_message: str | None = None) -> None:
        self._error_message = error_message
        self._done = 0
        self._streaming = False
        self._shown = ""

    @property
    def streaming(self) -> bool:
        return self._streaming

    def feed(self, snapshot: ConversationSnapshot) -> list[RenderOp]:
        ops: list[RenderOp] = []
        final_count = len(snapshot) - (1 if snapshot.in_flight else 0)
        if final_count < self._done:
            # The log was cleared; start over.
            self.reset()

        for message in snapshot.messages[self._done:final_count]:
            if self._streaming:
                ops.extend(self._finish(message))
            else:
                ops.append(MessageShown(message))
        self._done = final_count

        if snapshot.in_flight and snapshot.last is not None:
            reply = snapshot.last
            if not self._streaming:
                self._streaming = True
                self._shown = ""
                ops.append(ReplyStarted(reply))
            if reply.content.startswith(self._shown) and len(reply.content) > len(self._shown):
                ops.append(ReplyText(reply.content[len(self._shown):]))
                self._shown = reply.content
        return ops

    def reset(self) -> None:
        self._done = 0
        self._streaming = False
        self._shown = ""

    def _finish(self, message: ChatMessage) -> list[RenderOp]:
        self._streaming = False
        shown, self._shown = self._shown, ""
        if not message.content.startswith(shown) or self._is_error(message, shown):
            return [ReplyFinished(message, replaced=True)]
        ops: list[RenderOp] = []
        if len(message.content) > len(shown):
            ops.append(ReplyText(message.content[len(shown):]))
        ops.append(ReplyFinished(message))
        return ops

    def _is_error(self, message: ChatMessage, shown: str) -> bool:
        return (
            self._error_message is not None
            and message.content == self._error_message
            and shown != message.content
        )
