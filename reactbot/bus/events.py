"""Event types delivered by platform clients."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    """Top-level content kind of an inbound message."""

    TEXT = "text"
    MEDIA = "media"
    OTHER = "other"


class MediaKind(str, Enum):
    """Media subkind, only meaningful when the event kind is ``media``."""

    IMAGE = "image"
    AUDIO = "audio"
    OTHER = "other"


@dataclass(frozen=True)
class InboundEvent:
    """Message received from a chat platform. Immutable once built."""

    channel: str  # e.g. "telegram"
    message_id: str  # Platform-native message identifier
    sender_id: str  # User identifier
    chat_id: str  # Chat/channel identifier
    kind: EventKind
    media_kind: MediaKind | None = None
    mime_type: str = ""
    text: str = ""  # Plain message body
    extended_text: str | None = None  # Rich/extended body, preferred when set
    media_ref: str | None = None  # Platform handle to download the payload
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> str:
        """Globally unique message identity, safe to use as a file stem."""
        return f"{self.channel}_{self.chat_id}_{self.message_id}"

    @property
    def is_image(self) -> bool:
        return self.kind == EventKind.MEDIA and self.media_kind == MediaKind.IMAGE

    @property
    def is_audio(self) -> bool:
        return self.kind == EventKind.MEDIA and self.media_kind == MediaKind.AUDIO

    @property
    def has_downloadable_media(self) -> bool:
        """Whether the media listener should fetch this event's payload."""
        return (self.is_image or self.is_audio) and bool(self.media_ref)
