"""CLI entry point for chatstream."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from dataclasses import replace
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from chatstream.core.chat import Chat
from chatstream.core.config import describe_config, resolve_config
from chatstream.stream.session import Renderer, SessionState
from chatstream.types.config import ChatConfig


class ChatGroup(click.Group):
    """Group whose non-option arguments form the prompt.

    ``chatstream -m mistral what is new`` runs the group callback with the
    prompt words stored in ``ctx.obj["prompt_args"]``.  Arguments that start
    with a subcommand name are parsed normally.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if args and args[0] in self.commands:
            return super().parse_args(ctx, args)

        takes_value = self._option_arity(ctx)
        options: list[str] = []
        words: list[str] = []
        remaining = iter(args)
        for arg in remaining:
            name, has_value, _ = arg.partition("=")
            if name not in takes_value:
                words.append(arg)
                continue
            options.append(arg)
            if takes_value[name] and not has_value:
                value = next(remaining, None)
                if value is not None:
                    options.append(value)

        ctx.ensure_object(dict)
        ctx.obj["prompt_args"] = words
        return super().parse_args(ctx, options)

    def _option_arity(self, ctx: click.Context) -> dict[str, bool]:
        """Map every option spelling to whether it consumes a value."""
        arity: dict[str, bool] = {}
        for param in self.get_params(ctx):
            if isinstance(param, click.Option):
                for opt in (*param.opts, *param.secondary_opts):
                    arity[opt] = not (param.is_flag or param.count)
        return arity


@click.group(cls=ChatGroup, invoke_without_command=True)
@click.option("--url", "-u", default=None, help="Streaming chat endpoint URL")
@click.option("--model", "-m", default=None, help="Model name sent with each request")
@click.option("--timeout", type=float, default=None, help="Read timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Verbose (debug) logging on stderr")
@click.option("--rich/--no-rich", default=None, help="Rich terminal output (default: auto)")
@click.pass_context
def cli(
    ctx: click.Context,
    url: str | None,
    model: str | None,
    timeout: float | None,
    verbose: bool,
    rich: bool | None,
) -> None:
    """chatstream -- chat with a streaming NDJSON endpoint.

    \b
    Usage:
      chatstream "What plans do you offer?"
      echo "Hello" | chatstream --no-rich
      chatstream                              (interactive REPL)
      chatstream config
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"url": url, "model": model, "timeout": timeout}
    if ctx.invoked_subcommand is not None:
        return

    config = _load_config(ctx.obj["overrides"])
    prompt_args = ctx.obj.get("prompt_args", [])
    use_rich = rich if rich is not None else sys.stdout.isatty()

    if not prompt_args and sys.stdin.isatty():
        from chatstream.cli.repl import Repl

        asyncio.run(Repl(config, use_rich=use_rich).run())
        return

    prompt_text = " ".join(prompt_args) if prompt_args else sys.stdin.read()
    prompt_text = prompt_text.strip()
    if not prompt_text:
        click.echo("Error: empty prompt", err=True)
        sys.exit(1)

    ok = asyncio.run(_run_once(prompt_text, config, use_rich=use_rich))
    sys.exit(0 if ok else 1)


@cli.command("config")
@click.pass_context
def config_cmd(ctx: click.Context) -> None:
    """Show the resolved configuration."""
    config = _load_config(ctx.obj.get("overrides", {}))
    for key, value in describe_config(config).items():
        click.echo(f"{key} = {value!r}")


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(overrides: dict[str, Any]) -> ChatConfig:
    try:
        return resolve_config(**overrides)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


def make_renderer(config: ChatConfig, *, use_rich: bool, interactive: bool) -> Renderer:
    """Pick the Rich or plain renderer for the current output mode."""
    if use_rich:
        from chatstream.ui.terminal import RichRenderer

        return RichRenderer(error_message=config.error_message, show_user=interactive)
    from chatstream.cli.output import PlainRenderer

    return PlainRenderer(error_message=config.error_message, show_history=interactive)


async def _run_once(prompt: str, config: ChatConfig, *, use_rich: bool) -> bool:
    """Send one prompt, stream the reply, and report whether it succeeded."""
    chat = Chat(replace(config, greeting=None))
    renderer = make_renderer(config, use_rich=use_rich, interactive=False)
    with abort_on_interrupt(chat):
        await chat.send(prompt, renderer)
    return chat.session is not None and chat.session.state is SessionState.CLOSED


class abort_on_interrupt:
    """Context manager: Ctrl+C aborts the streaming reply instead of exiting."""

    def __init__(self, chat: Chat) -> None:
        self._chat = chat
        self._original_handler: Any = None
        self._installed = False

    def __enter__(self) -> abort_on_interrupt:
        loop = asyncio.get_running_loop()

        def _cancel_handler(signum: int, frame: Any) -> None:
            loop.call_soon_threadsafe(self._chat.abort)

        try:
            self._original_handler = signal.getsignal(signal.SIGINT)
            signal.signal(signal.SIGINT, _cancel_handler)
        except ValueError:
            return self  # not the main thread
        self._installed = True
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._installed:
            signal.signal(signal.SIGINT, self._original_handler)
            self._installed = False


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
