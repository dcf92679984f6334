"""Interactive REPL for chatstream."""

from __future__ import annotations

import asyncio
import logging

from chatstream.cli.main import abort_on_interrupt, make_renderer
from chatstream.core.chat import Chat, TurnInProgressError
from chatstream.types.config import ChatConfig

logger = logging.getLogger(__name__)

TOPICS = ("Billing", "Support", "Features", "Pricing")


class Repl:
    """Interactive read-eval-print loop.

    Enters a loop: read prompt -> stream reply -> repeat.  Ctrl+C while a
    reply is streaming aborts that reply; Ctrl+D exits.
    """

    SLASH_COMMANDS = {
        "/help": "Show available commands",
        "/topics": "List quick-start topics",
        "/topic": "Ask about a topic (e.g. /topic billing why was I charged twice?)",
        "/history": "Show the conversation so far",
        "/clear": "Start a new conversation",
        "/exit": "Exit (or press Ctrl+D)",
    }

    def __init__(self, config: ChatConfig, *, use_rich: bool = True) -> None:
        self._config = config
        self._use_rich = use_rich
        self._chat = Chat(config)
        self._renderer = make_renderer(config, use_rich=use_rich, interactive=True)

    @property
    def chat(self) -> Chat:
        return self._chat

    # -- Main loop -------------------------------------------------------------

    async def run(self) -> None:
        self._print_banner()
        self._renderer(self._chat.snapshot())

        while True:
            try:
                prompt = await self._read_prompt()
            except EOFError:
                print("\nGoodbye!")
                break
            except KeyboardInterrupt:
                print()
                continue

            if not prompt:
                continue

            if prompt.startswith("/"):
                if prompt.split()[0].lower() == "/exit":
                    print("Goodbye!")
                    break
                prompt = await self._handle_slash_command(prompt)
                if not prompt:
                    continue

            await self.send(prompt)

    async def send(self, prompt: str) -> None:
        """Stream the reply to *prompt*, letting Ctrl+C abort it."""
        try:
            with abort_on_interrupt(self._chat):
                await self._chat.send(prompt, self._renderer)
        except TurnInProgressError as exc:
            print(f"  {exc}")

    async def _read_prompt(self, label: str = "> ") -> str:
        """Read a prompt from stdin without blocking the event loop."""
        loop = asyncio.get_running_loop()
        line = await loop.run_in_executor(None, lambda: input(label))
        return line.strip()

    # -- Slash commands --------------------------------------------------------

    async def _handle_slash_command(self, cmd: str) -> str | None:
        """Handle a slash command; return a prompt to send, if it produced one."""
        parts = cmd.strip().split(maxsplit=1)
        base = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if base == "/help":
            self._print_help()
        elif base == "/topics":
            self._print_topics()
        elif base == "/topic":
            return await self._topic_prompt(arg)
        elif base == "/history":
            self._print_history()
        elif base == "/clear":
            self._chat.reset()
            reset = getattr(self._renderer, "reset", None)
            if reset is not None:
                reset()
            print("\033[2J\033[H", end="")
            self._renderer(self._chat.snapshot())
        else:
            matches = [c for c in self.SLASH_COMMANDS if c.startswith(base)]
            if matches:
                print(f"  Unknown command: {base}. Did you mean: {', '.join(matches)}?")
            else:
                print(f"  Unknown command: {base}. Type /help to see all commands.")
        return None

    async def _topic_prompt(self, arg: str) -> str | None:
        name, _, rest = arg.partition(" ")
        topic = resolve_topic(name)
        if topic is None:
            print(f"  Unknown topic {name!r}. Topics: {', '.join(TOPICS)}")
            return None
        if not rest.strip():
            try:
                rest = await self._read_prompt(f"{topic} ")
            except (EOFError, KeyboardInterrupt):
                print()
                return None
        return topic_prompt(topic, rest)

    # -- Display ---------------------------------------------------------------

    def _print_banner(self) -> None:
        if self._use_rich:
            from chatstream.ui.terminal import RichRenderer

            if isinstance(self._renderer, RichRenderer):
                self._renderer.print_banner(self._config)
                self._renderer.print_topics(TOPICS)
                return
        print(f"ChatBot  ({self._config.model} @ {self._config.url})")
        print(f"Topics: {', '.join(TOPICS)}  -- type /help for commands")

    def _print_help(self) -> None:
        print()
        for name, desc in self.SLASH_COMMANDS.items():
            print(f"  {name:<10} {desc}")
        print()

    def _print_topics(self) -> None:
        for topic in TOPICS:
            print(f"  /topic {topic.lower()}")

    def _print_history(self) -> None:
        snapshot = self._chat.snapshot()
        if self._use_rich:
            from chatstream.ui.terminal import RichRenderer

            if isinstance(self._renderer, RichRenderer):
                self._renderer.print_history(snapshot)
                return
        for message in snapshot:
            print(f"[{message.timestamp}] {message.role.value}: {message.content}")


def resolve_topic(name: str) -> str | None:
    """Match *name* case-insensitively against the quick-start topics."""
    for topic in TOPICS:
        if topic.lower() == name.strip().lower():
            return topic
    return None


def topic_prompt(topic: str, text: str) -> str:
    """Prefix *text* with the topic, the way the topic chips fill the input."""
    return f"{topic} {text.strip()}".strip()
