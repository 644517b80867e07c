"""Chat platform clients."""

from reactbot.channels.base import BaseChannel

__all__ = ["BaseChannel"]
