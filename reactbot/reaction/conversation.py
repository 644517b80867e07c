"""Conversation history used to prompt the reaction model."""

import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Literal

from loguru import logger

Role = Literal["user", "model"]

HISTORY_PER_CHAT = "per_chat"
HISTORY_SHARED = "shared"
SHARED_KEY = "*"


@dataclass
class Turn:
    """One history entry. ``content`` is a string or a list of content parts."""

    role: Role
    content: str | list[dict[str, Any]]

    def to_message(self) -> dict[str, Any]:
        """Render as a chat-completion message."""
        return {
            "role": "assistant" if self.role == "model" else "user",
            "content": self.content,
        }


@dataclass
class ConversationContext:
    """
    Ordered user/model turns, starting with a fixed preamble.

    The preamble is never trimmed. When ``max_turns`` is set, the oldest
    non-preamble turns are dropped in user/model pairs once the limit is hit.
    """

    preamble: list[Turn] = field(default_factory=list)
    turns: list[Turn] = field(default_factory=list)
    max_turns: int = 0

    def messages(self, pending: Turn | None = None) -> list[dict[str, Any]]:
        """Build the chat-completion message list, optionally with a pending turn."""
        msgs = [t.to_message() for t in self.preamble + self.turns]
        if pending is not None:
            msgs.append(pending.to_message())
        return msgs

    def append_exchange(self, user: Turn, model: Turn) -> None:
        """Record a completed request/reply pair."""
        self.turns.append(user)
        self.turns.append(model)
        self._trim()

    def _trim(self) -> None:
        if self.max_turns <= 0:
            return
        while len(self.turns) > self.max_turns and len(self.turns) >= 2:
            del self.turns[:2]

    def __len__(self) -> int:
        return len(self.preamble) + len(self.turns)


class ConversationStore:
    """
    Owns every conversation context and serializes access to each one.

    ``acquire`` holds a per-context lock for the whole build-request, await
    reply, append-turns cycle, so concurrent events never interleave on one
    context. In ``per_chat`` mode each chat gets its own context (and lock);
    in ``shared`` mode every chat shares a single context, which serializes
    all AI calls process-wide.

    With ``max_contexts`` set, the least recently used contexts are forgotten
    once the limit is passed. A context that is acquired or waited on is
    never evicted, and neither is its lock.
    """

    def __init__(
        self,
        preamble: list[tuple[str, str]],
        mode: str = HISTORY_PER_CHAT,
        max_turns: int = 0,
        max_contexts: int = 0,
    ):
        if mode not in (HISTORY_PER_CHAT, HISTORY_SHARED):
            raise ValueError(f"Unknown history mode: {mode}")
        self.mode = mode
        self.max_turns = max_turns
        self.max_contexts = max_contexts
        self._preamble = [Turn(role=role, content=text) for role, text in preamble]
        self._contexts: OrderedDict[str, ConversationContext] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}  # acquirers holding or waiting per key

    def key_for(self, chat_id: str) -> str:
        return SHARED_KEY if self.mode == HISTORY_SHARED else chat_id

    def get(self, chat_id: str) -> ConversationContext:
        """Return (creating if needed) the context for *chat_id* without locking."""
        key = self.key_for(chat_id)
        ctx = self._contexts.get(key)
        if ctx is not None:
            self._contexts.move_to_end(key)
            return ctx

        ctx = ConversationContext(preamble=list(self._preamble), max_turns=self.max_turns)
        self._contexts[key] = ctx
        logger.debug(f"Created conversation context '{key}'")
        self._evict(keep=key)
        return ctx

    @asynccontextmanager
    async def acquire(self, chat_id: str) -> AsyncIterator[ConversationContext]:
        """Exclusive access to the context for *chat_id*."""
        key = self.key_for(chat_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield self.get(chat_id)
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                # Cleared or evicted while in use
                if key not in self._contexts:
                    self._locks.pop(key, None)

    def clear(self, chat_id: str | None = None) -> None:
        """Forget history for one chat, or for every chat when *chat_id* is None."""
        keys = list(self._contexts) if chat_id is None else [self.key_for(chat_id)]
        for key in keys:
            self._forget(key)

    def __len__(self) -> int:
        return len(self._contexts)

    def _forget(self, key: str) -> None:
        self._contexts.pop(key, None)
        if key not in self._users:
            self._locks.pop(key, None)

    def _evict(self, keep: str) -> None:
        if self.max_contexts <= 0:
            return
        for key in list(self._contexts):
            if len(self._contexts) <= self.max_contexts:
                break
            if key == keep or key in self._users:
                continue
            self._forget(key)
            logger.debug(f"Evicted conversation context '{key}'")
