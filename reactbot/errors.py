"""Exception hierarchy for reactbot.

Listeners raise these; the event dispatcher catches them per listener and
folds them into a single :class:`DispatchError`.
"""


class ReactBotError(Exception):
    """Base exception for reactbot."""


class TransportError(ReactBotError):
    """Platform send or download failure."""


class ClassificationError(ReactBotError):
    """Stored media missing or unreadable when classifying an event."""


class GenerationError(ReactBotError):
    """AI backend call or file upload failed."""


class DeliveryError(ReactBotError):
    """Reaction could not be sent to the platform."""


class ListenerTimeoutError(ReactBotError):
    """A listener ran past the dispatcher's per-listener deadline."""


class DispatchError(ReactBotError):
    """All listener failures for one event, combined.

    ``failures`` keeps ``(listener_name, exception)`` pairs in invocation
    order; ``str()`` joins the individual messages with ``"; "``.
    """

    SEPARATOR = "; "

    def __init__(self, failures: list[tuple[str, Exception]]):
        self.failures = failures
        super().__init__(
            self.SEPARATOR.join(f"{name}: {err}" for name, err in failures)
        )

    @property
    def errors(self) -> list[Exception]:
        return [err for _, err in self.failures]
