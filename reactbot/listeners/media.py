"""Downloads image and audio attachments into the media store."""

from loguru import logger

from reactbot.bus.dispatcher import EventDispatcher, Listener
from reactbot.bus.events import InboundEvent
from reactbot.channels.base import BaseChannel
from reactbot.errors import TransportError
from reactbot.media.store import MediaStore


class MediaDownloadListener(Listener):
    """Fetches image/audio payloads so later listeners can read them from disk.

    Must be registered before :class:`ReactionListener`. Every other event
    kind is ignored.
    """

    def __init__(self, channel: BaseChannel, media_store: MediaStore):
        self.channel = channel
        self.media_store = media_store

    @property
    def name(self) -> str:
        return "media_download"

    async def handle(self, dispatcher: EventDispatcher, event: InboundEvent) -> None:
        if not event.has_downloadable_media:
            return

        data = await self.channel.download_media(event)
        try:
            path = await self.media_store.write(event, data)
        except OSError as e:
            raise TransportError(f"Failed to store media for {event.key}: {e}") from e
        logger.debug(f"Downloaded {event.media_kind.value} for {event.key} to {path}")
