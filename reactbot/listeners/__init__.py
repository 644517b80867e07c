"""Dispatcher listeners and the standard reaction pipeline."""

from reactbot.bus.dispatcher import EventDispatcher
from reactbot.channels.base import BaseChannel
from reactbot.listeners.diagnostics import EventLogListener
from reactbot.listeners.media import MediaDownloadListener
from reactbot.listeners.reaction import ReactionListener
from reactbot.media.store import MediaStore
from reactbot.reaction.generator import ReactionGenerator

__all__ = [
    "EventLogListener",
    "MediaDownloadListener",
    "ReactionListener",
    "build_pipeline",
]


def build_pipeline(
    channel: BaseChannel,
    media_store: MediaStore,
    generator: ReactionGenerator,
    listener_timeout: float | None = None,
) -> EventDispatcher:
    """Create a dispatcher with download -> reaction -> log listeners, in that order."""
    return (
        EventDispatcher(listener_timeout=listener_timeout)
        .register(MediaDownloadListener(channel, media_store))
        .register(ReactionListener(channel, media_store, generator))
        .register(EventLogListener())
    )
