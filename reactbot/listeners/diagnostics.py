"""Debug trace of every inbound event."""

from loguru import logger

from reactbot.bus.dispatcher import EventDispatcher, Listener
from reactbot.bus.events import InboundEvent


class EventLogListener(Listener):
    """Logs each event. Registered last so it runs even when earlier listeners fail."""

    @property
    def name(self) -> str:
        return "event_log"

    async def handle(self, dispatcher: EventDispatcher, event: InboundEvent) -> None:
        kind = event.kind.value
        if event.media_kind:
            kind = f"{kind}/{event.media_kind.value}"
        logger.debug(
            f"Event {event.key}: kind={kind} sender={event.sender_id} "
            f"mime={event.mime_type or '-'} text={event.text[:50]!r}"
        )
