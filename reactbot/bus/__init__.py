"""Inbound events and the ordered listener dispatcher."""

from reactbot.bus.dispatcher import EventDispatcher, FunctionListener, Listener
from reactbot.bus.events import EventKind, InboundEvent, MediaKind

__all__ = [
    "EventDispatcher",
    "EventKind",
    "FunctionListener",
    "InboundEvent",
    "Listener",
    "MediaKind",
]
