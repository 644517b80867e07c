"""Classifies each event and reacts to it with a generated emoji."""

from loguru import logger

from reactbot.bus.dispatcher import EventDispatcher, Listener
from reactbot.bus.events import InboundEvent
from reactbot.channels.base import BaseChannel
from reactbot.errors import ClassificationError, DeliveryError
from reactbot.media.store import MediaStore
from reactbot.reaction.content import classify
from reactbot.reaction.generator import ReactionGenerator


class ReactionListener(Listener):
    """
    Classify, generate, react.

    Unsupported content and classification failures are answered with the
    fallback emoji without calling the model; a classification failure is
    still raised afterwards so the dispatcher reports it, even when the
    fallback reaction itself could not be delivered. Generation errors
    propagate before anything is sent.
    """

    def __init__(
        self,
        channel: BaseChannel,
        media_store: MediaStore,
        generator: ReactionGenerator,
    ):
        self.channel = channel
        self.media_store = media_store
        self.generator = generator

    @property
    def name(self) -> str:
        return "reaction"

    async def handle(self, dispatcher: EventDispatcher, event: InboundEvent) -> None:
        try:
            content = await classify(event, self.media_store)
        except ClassificationError:
            try:
                await self._react(event, self.generator.fallback_emoji)
            except DeliveryError as e:
                logger.warning(f"Fallback reaction for {event.key} not delivered: {e}")
            raise

        emoji = await self.generator.generate(content, event.chat_id)
        emoji = self.generator.restrict(emoji, self.channel.supported_reactions)
        await self._react(event, emoji)

    async def _react(self, event: InboundEvent, emoji: str) -> None:
        await self.channel.send_reaction(
            event.chat_id, event.sender_id, event.message_id, emoji
        )
        logger.info(f"Reacted {emoji} to {event.key}")
