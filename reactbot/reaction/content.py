"""Content classification for inbound events."""

from dataclasses import dataclass
from pathlib import Path

from reactbot.bus.events import EventKind, InboundEvent
from reactbot.errors import ClassificationError
from reactbot.media.store import MediaStore


@dataclass(frozen=True)
class Text:
    body: str


@dataclass(frozen=True)
class Image:
    data: bytes
    mime_type: str
    path: Path


@dataclass(frozen=True)
class Audio:
    """Stored voice or audio attachment, referenced by path."""

    mime_type: str
    path: Path


@dataclass(frozen=True)
class Unsupported:
    reason: str = ""


ClassifiedContent = Text | Image | Audio | Unsupported


async def classify(event: InboundEvent, media_store: MediaStore) -> ClassifiedContent:
    """Turn an inbound event into one of the reaction content variants.

    Image bytes are read from the store and audio is referenced by its stored
    path. The download listener must have run earlier in the dispatch pass.

    Raises:
        ClassificationError: If the event is an image or audio message whose
            attachment is not in the store.
    """
    if event.kind == EventKind.TEXT:
        body = event.extended_text or event.text
        if not body or not body.strip():
            return Unsupported("empty text")
        return Text(body)

    if event.is_image:
        path = media_store.path_for(event)
        try:
            data = await media_store.read(event)
        except OSError as e:
            raise ClassificationError(
                f"media not available for {event.key} ({path.name}): {e.strerror or e}"
            ) from e
        return Image(data=data, mime_type=event.mime_type, path=path)

    if event.is_audio:
        # Audio is uploaded from disk, so only its presence is checked here
        path = media_store.path_for(event)
        if not media_store.exists(event):
            raise ClassificationError(f"media not available for {event.key} ({path.name})")
        return Audio(mime_type=event.mime_type, path=path)

    if event.kind == EventKind.MEDIA:
        return Unsupported(f"media kind {event.media_kind.value if event.media_kind else 'unknown'}")
    return Unsupported(f"event kind {event.kind.value}")
