"""On-disk store for downloaded message attachments."""

import mimetypes
import os
from pathlib import Path

from loguru import logger

from reactbot.bus.events import InboundEvent

DEFAULT_EXTENSION = ".bin"

# Used only when the platform's mimetypes table knows nothing about a type.
_FALLBACK_EXTENSIONS = {
    "audio/ogg": ".ogg",
    "audio/opus": ".opus",
    "audio/aac": ".aac",
    "audio/amr": ".amr",
    "image/webp": ".webp",
}


def extension_for(mime_type: str) -> str:
    """Return the canonical file extension for *mime_type*.

    The first extension reported by :func:`mimetypes.guess_all_extensions`
    wins, so the writer and every later reader agree on the same path.
    MIME parameters (``audio/ogg; codecs=opus``) are ignored.
    """
    base = mime_type.split(";", 1)[0].strip().lower()
    if not base:
        return DEFAULT_EXTENSION
    candidates = mimetypes.guess_all_extensions(base)
    if candidates:
        return candidates[0]
    return _FALLBACK_EXTENSIONS.get(base, DEFAULT_EXTENSION)


class MediaStore:
    """Stores attachment bytes keyed by message identity and MIME type.

    Layout::

        base_dir/
        ├── telegram_42_1001.jpg
        └── telegram_42_1002.ogg

    Each call is independent; nothing is cached between requests and files
    are never deleted here.
    """

    def __init__(self, base_dir: Path):
        self._base_dir = Path(base_dir).expanduser()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, event: InboundEvent) -> Path:
        """Deterministic storage path for *event*'s attachment."""
        return self._base_dir / f"{event.key}{extension_for(event.mime_type)}"

    def exists(self, event: InboundEvent) -> bool:
        return self.path_for(event).is_file()

    async def write(self, event: InboundEvent, data: bytes) -> Path:
        """Persist *data* for *event* with owner-only permissions.

        Returns:
            Full path of the stored file.
        """
        self._base_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(event)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        # O_CREAT's mode is ignored when the file already existed
        os.chmod(path, 0o600)
        logger.debug(f"Stored {len(data)} bytes of media: {path}")
        return path

    async def read(self, event: InboundEvent) -> bytes:
        """Read the stored attachment for *event*.

        Raises:
            FileNotFoundError: If nothing has been stored for the event.
        """
        return self.path_for(event).read_bytes()
