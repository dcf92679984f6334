"""Basic text output for non-interactive mode."""

from __future__ import annotations

import sys
from typing import TextIO

from chatstream.types.messages import ConversationSnapshot, Role
from chatstream.ui.streaming import (
    MessageShown,
    ReplyFinished,
    ReplyStarted,
    ReplyText,
    StreamTracker,
)


class PlainRenderer:
    """Write streamed reply text to a plain stream, no styling.

    Only the assistant reply goes to *out*; an error replacement is
    written to *err* so piped output never contains it.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        err: TextIO | None = None,
        *,
        error_message: str | None = None,
        show_history: bool = False,
    ) -> None:
        self._out = out or sys.stdout
        self._err = err or sys.stderr
        self._tracker = StreamTracker(error_message)
        self._show_history = show_history

    def __call__(self, snapshot: ConversationSnapshot) -> None:
        for op in self._tracker.feed(snapshot):
            match op:
                case MessageShown(message=message):
                    if self._show_history:
                        prefix = "> " if message.role is Role.USER else ""
                        self._out.write(f"{prefix}{message.content}\n")
                case ReplyStarted():
                    pass
                case ReplyText(text=text):
                    self._out.write(text)
                    self._out.flush()
                case ReplyFinished(message=message, replaced=True):
                    self._out.write("\n")
                    self._err.write(f"[Error] {message.content}\n")
                case ReplyFinished():
                    self._out.write("\n")
                    self._out.flush()
