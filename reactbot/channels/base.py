"""Base platform client interface for chat channels."""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from loguru import logger

from reactbot.bus.events import InboundEvent

EventHandler = Callable[[InboundEvent], Awaitable[Any]]


class BaseChannel(ABC):
    """
    Abstract base class for chat platform clients.

    A channel connects to the platform, converts incoming messages into
    :class:`InboundEvent` objects and hands them to its subscribers. It also
    exposes the outbound primitives listeners need: download, send, react.
    """

    name: str = "base"

    # None means the platform accepts any emoji as a reaction
    supported_reactions: frozenset[str] | None = None

    def __init__(self, config: Any):
        self.config = config
        self._handlers: list[EventHandler] = []
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """Connect to the platform and begin delivering events."""

    @abstractmethod
    async def stop(self) -> None:
        """Disconnect and release platform resources."""

    @abstractmethod
    async def download_media(self, event: InboundEvent) -> bytes:
        """Fetch the raw attachment bytes for *event*.

        Raises:
            TransportError: If the download fails.
        """

    @abstractmethod
    async def send_message(self, chat_id: str, content: str) -> None:
        """Send a plain text message.

        Raises:
            TransportError: If the platform rejects the message.
        """

    @abstractmethod
    async def send_reaction(
        self, chat_id: str, sender_id: str, message_id: str, emoji: str
    ) -> None:
        """React to a message with *emoji*.

        Raises:
            DeliveryError: If the platform rejects the reaction.
        """

    def subscribe(self, handler: EventHandler) -> None:
        """Register a coroutine called once per inbound event."""
        self._handlers.append(handler)

    def is_allowed(self, sender_id: str) -> bool:
        """
        Check if a sender is allowed to trigger reactions.

        An empty ``allow_from`` list allows everyone. Composite sender ids
        (``"123456|username"``) match on any of their parts.
        """
        allow_list = getattr(self.config, "allow_from", [])
        if not allow_list:
            return True

        sender_str = str(sender_id)
        if sender_str in allow_list:
            return True
        if "|" in sender_str:
            for part in sender_str.split("|"):
                if part and part in allow_list:
                    return True
        return False

    async def _emit(self, event: InboundEvent) -> None:
        """Deliver *event* to every subscriber, respecting the allow list."""
        if not self.is_allowed(event.sender_id):
            logger.warning(
                f"Ignoring message from {event.sender_id} on {self.name}: not in allow_from"
            )
            return
        for handler in self._handlers:
            await handler(event)

    @property
    def is_running(self) -> bool:
        return self._running
