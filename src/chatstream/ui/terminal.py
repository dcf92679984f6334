"""Rich-powered terminal rendering of the conversation."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chatstream.types.config import ChatConfig
from chatstream.types.messages import ChatMessage, ConversationSnapshot, Role
from chatstream.ui.streaming import (
    MessageShown,
    ReplyFinished,
    ReplyStarted,
    ReplyText,
    StreamTracker,
)

# ── Palette ──────────────────────────────────────────────────────────────────

STYLE_USER = "bold #c94429"           # brand accent, user bubbles
STYLE_ASSISTANT = "#e2e8f0"
STYLE_ASSISTANT_LABEL = "bold #60a5fa"
STYLE_TIMESTAMP = "dim #7c7c8a"
STYLE_ERROR = "bold #f87171"
STYLE_TOPIC = "#94a3b8"
STYLE_BORDER = "#3f3f50"

ASSISTANT_ICON = "\U0001f916"         # robot face


class RichRenderer:
    """Renderer callback that streams snapshots to a Rich console.

    Finalized user messages are right-aligned, assistant replies are
    streamed on the left as deltas arrive.  A reply that fails is
    replaced on screen by the error text in the error style.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        error_message: str | None = None,
        show_user: bool = True,
    ) -> None:
        self._console = console or Console()
        self._tracker = StreamTracker(error_message)
        self._show_user = show_user

    @property
    def console(self) -> Console:
        return self._console

    def __call__(self, snapshot: ConversationSnapshot) -> None:
        for op in self._tracker.feed(snapshot):
            match op:
                case MessageShown(message=message):
                    self.print_message(message)
                case ReplyStarted(message=message):
                    self._console.print(self._assistant_label(message))
                    self._console.print("  ", end="")
                case ReplyText(text=text):
                    self._console.print(
                        text.replace("\n", "\n  "), end="",
                        style=STYLE_ASSISTANT, markup=False, highlight=False,
                    )
                case ReplyFinished(message=message, replaced=True):
                    self._console.print()
                    self._console.print(Text(f"  {message.content}", style=STYLE_ERROR))
                case ReplyFinished():
                    self._console.print()

    def reset(self) -> None:
        self._tracker.reset()

    # ── Whole messages ──────────────────────────────────────────────────────

    def print_message(self, message: ChatMessage) -> None:
        if message.role is Role.USER:
            if not self._show_user:
                return
            line = Text(message.content, style=STYLE_USER)
            line.append(f"  {message.timestamp}", style=STYLE_TIMESTAMP)
            self._console.print(line, justify="right")
            return
        self._console.print(self._assistant_label(message))
        self._console.print(
            Text(f"  {message.content}".replace("\n", "\n  "), style=STYLE_ASSISTANT),
        )

    def print_history(self, snapshot: ConversationSnapshot) -> None:
        for message in snapshot:
            self.print_message(message)

    @staticmethod
    def _assistant_label(message: ChatMessage) -> Text:
        label = Text(f"{ASSISTANT_ICON} Assistant", style=STYLE_ASSISTANT_LABEL)
        if message.timestamp:
            label.append(f"  {message.timestamp}", style=STYLE_TIMESTAMP)
        return label

    # ── Chrome ──────────────────────────────────────────────────────────────

    def print_banner(self, config: ChatConfig) -> None:
        tbl = Table(show_header=False, show_edge=False, padding=(0, 1), expand=False)
        tbl.add_column(style=STYLE_TOPIC, justify="right", no_wrap=True)
        tbl.add_column(style=STYLE_ASSISTANT, no_wrap=True)
        tbl.add_row("Endpoint", config.url)
        tbl.add_row("Model", config.model)
        self._console.print(Panel(
            tbl,
            title=f"{ASSISTANT_ICON} ChatBot",
            title_align="left",
            border_style=STYLE_BORDER,
            expand=False,
        ))

    def print_topics(self, topics: Iterable[str]) -> None:
        line = Text("  ")
        for topic in topics:
            line.append(f" {topic} ", style=f"{STYLE_TOPIC} on #1f1f2a")
            line.append("  ")
        self._console.print(line)
