"""CLI commands for reactbot."""

import asyncio
import signal
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from reactbot import __logo__, __version__
from reactbot.errors import ReactBotError

app = typer.Typer(
    name="reactbot",
    help=f"{__logo__} reactbot - reacts to chat messages with AI-picked emoji",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} reactbot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """reactbot - emoji reaction bot."""
    pass


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _validate_config(config) -> str | None:
    """Return an error message for configuration that cannot start, or None."""
    if not config.channels.telegram.token:
        return "No Telegram bot token configured (channels.telegram.token)"
    if config.get_provider() is None:
        return f"Unknown provider '{config.provider_name}' for model '{config.reaction.model}'"
    if not config.get_api_key():
        return f"No API key configured for '{config.provider_name}' (providers.{config.provider_name}.apiKey)"
    return None


def build_bot(config):
    """Wire the channel, reaction generator and dispatcher from *config*.

    Returns:
        ``(channel, dispatcher)`` with the dispatcher already subscribed.
    """
    from reactbot.channels.telegram import TelegramChannel
    from reactbot.listeners import build_pipeline
    from reactbot.media.store import MediaStore
    from reactbot.prompts.reaction import REACTION_PREAMBLE
    from reactbot.providers.litellm_provider import LiteLLMProvider
    from reactbot.reaction.conversation import ConversationStore
    from reactbot.reaction.generator import ReactionGenerator

    reaction = config.reaction
    provider = LiteLLMProvider(
        api_key=config.get_api_key(),
        default_model=reaction.model,
        api_base=config.get_api_base(),
        request_timeout=reaction.request_timeout,
    )
    conversations = ConversationStore(
        REACTION_PREAMBLE,
        mode=reaction.history_mode,
        max_turns=reaction.max_history_turns,
        max_contexts=reaction.max_chats,
    )
    generator = ReactionGenerator(
        provider,
        conversations,
        fallback_emoji=reaction.fallback_emoji,
        max_tokens=reaction.max_tokens,
        temperature=reaction.temperature,
    )

    channel = TelegramChannel(config.channels.telegram)
    dispatcher = build_pipeline(
        channel,
        MediaStore(config.media_path),
        generator,
        listener_timeout=config.dispatch.listener_timeout,
    )
    channel.subscribe(dispatcher.dispatch)
    return channel, dispatcher


async def _serve(channel) -> None:
    """Run *channel* until SIGINT/SIGTERM, then disconnect."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
            installed.append(sig)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C raises instead
            pass

    try:
        await channel.start()
        await stop.wait()
    finally:
        console.print("\nShutting down...")
        await channel.stop()
        for sig in installed:
            loop.remove_signal_handler(sig)


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Connect to the chat platform and react to every incoming message."""
    from reactbot.config.loader import load_config

    _configure_logging(verbose)

    try:
        config = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    error = _validate_config(config)
    if error:
        console.print(f"[red]Error: {error}[/red]")
        raise typer.Exit(1)

    channel, dispatcher = build_bot(config)
    names = ", ".join(listener.name for listener in dispatcher.listeners)
    console.print(f"{__logo__} Starting reactbot on {channel.name} ({config.reaction.model})")
    console.print(f"[green]✓[/green] Listeners: {names}")
    console.print(f"[green]✓[/green] History: {config.reaction.history_mode}")

    try:
        asyncio.run(_serve(channel))
    except KeyboardInterrupt:
        pass
    except ReactBotError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
