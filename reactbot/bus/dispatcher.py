"""Ordered, non-aborting event dispatcher."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from loguru import logger

from reactbot.bus.events import InboundEvent
from reactbot.errors import DispatchError, ListenerTimeoutError

ListenerFunc = Callable[["EventDispatcher", InboundEvent], Awaitable[Any]]


class Listener(ABC):
    """A handler invoked once per inbound event.

    Listeners are mutually unaware. A listener signals failure by raising;
    the dispatcher isolates the exception and keeps going.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in logs and aggregated errors."""

    @abstractmethod
    async def handle(self, dispatcher: EventDispatcher, event: InboundEvent) -> None:
        """Process one event. Raise to report an error for this event."""


class FunctionListener(Listener):
    """Adapts a plain ``async def fn(dispatcher, event)`` to :class:`Listener`."""

    def __init__(self, func: ListenerFunc, name: str | None = None):
        self._func = func
        self._name = name or getattr(func, "__name__", "listener")

    @property
    def name(self) -> str:
        return self._name

    async def handle(self, dispatcher: EventDispatcher, event: InboundEvent) -> None:
        await self._func(dispatcher, event)


class EventDispatcher:
    """
    Invokes registered listeners in registration order for every event.

    Registration order is part of the contract: the media download listener
    must be registered before the reaction listener that reads the stored
    file. Listeners are registered once at startup; the sequence is frozen
    on the first dispatch so concurrent ``dispatch`` calls only ever read it.
    """

    def __init__(self, listener_timeout: float | None = None):
        self._listeners: list[Listener] = []
        self._frozen = False
        self.listener_timeout = listener_timeout if listener_timeout and listener_timeout > 0 else None

    @property
    def listeners(self) -> tuple[Listener, ...]:
        return tuple(self._listeners)

    def register(self, listener: Listener | ListenerFunc) -> EventDispatcher:
        """Append a listener. Returns the dispatcher so calls can be chained."""
        if self._frozen:
            raise RuntimeError("Cannot register listeners after dispatching has started")
        if not isinstance(listener, Listener):
            listener = FunctionListener(listener)
        self._listeners.append(listener)
        logger.debug(f"Registered listener #{len(self._listeners)}: {listener.name}")
        return self

    async def dispatch(self, event: InboundEvent) -> DispatchError | None:
        """Run every listener for *event* and return the combined failure, if any.

        A failing listener never prevents the next one from running. The
        aggregate is logged once after the full pass and returned, not raised.
        """
        self._frozen = True
        failures: list[tuple[str, Exception]] = []

        for listener in self._listeners:
            try:
                await self._invoke(listener, event)
            except Exception as e:
                logger.debug(f"Listener {listener.name} failed for {event.key}: {e}")
                failures.append((listener.name, e))

        if not failures:
            return None

        error = DispatchError(failures)
        logger.error(f"Dispatch of {event.key} finished with {len(failures)} error(s): {error}")
        return error

    async def _invoke(self, listener: Listener, event: InboundEvent) -> None:
        if self.listener_timeout is None:
            await listener.handle(self, event)
            return
        try:
            await asyncio.wait_for(listener.handle(self, event), timeout=self.listener_timeout)
        except asyncio.TimeoutError as e:
            raise ListenerTimeoutError(
                f"{listener.name} timed out after {self.listener_timeout:g}s"
            ) from e
