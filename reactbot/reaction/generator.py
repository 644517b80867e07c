"""Reaction generation: classified content in, one emoji out."""

import base64
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Collection

from loguru import logger

from reactbot.errors import GenerationError
from reactbot.prompts.reaction import AUDIO_PLACEHOLDER, IMAGE_PLACEHOLDER
from reactbot.providers.base import LLMProvider, UploadedFile
from reactbot.reaction.content import Audio, ClassifiedContent, Image, Text, Unsupported
from reactbot.reaction.conversation import ConversationStore, Turn
from reactbot.reaction.emoji import extract_emoji, strip_variation_selectors

DEFAULT_FALLBACK_EMOJI = "🤷"


class ReactionGenerator:
    """
    Picks a reaction emoji for classified content using the LLM provider.

    The generator is the only writer of the conversation store. Each request
    runs under the store's per-context lock, and turns are appended only
    after the provider replied, so a failed call leaves history untouched.
    """

    def __init__(
        self,
        provider: LLMProvider,
        conversations: ConversationStore,
        fallback_emoji: str = DEFAULT_FALLBACK_EMOJI,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        self.provider = provider
        self.conversations = conversations
        self.fallback_emoji = fallback_emoji
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(self, content: ClassifiedContent, chat_id: str) -> str:
        """Return the reaction emoji for *content* in *chat_id*.

        Raises:
            GenerationError: If the provider call or the audio upload fails.
        """
        match content:
            case Text(body=body):
                turn = Turn(role="user", content=body)
                return await self._exchange(chat_id, request=turn, record=turn)
            case Image(data=data, mime_type=mime_type):
                b64 = base64.b64encode(data).decode()
                request = Turn(
                    role="user",
                    content=[self.provider.image_part(f"data:{mime_type};base64,{b64}")],
                )
                record = Turn(role="user", content=IMAGE_PLACEHOLDER.format(mime_type=mime_type))
                return await self._exchange(chat_id, request=request, record=record)
            case Audio(mime_type=mime_type, path=path):
                async with self._uploaded(path, mime_type) as file:
                    request = Turn(role="user", content=[self.provider.file_part(file)])
                    record = Turn(
                        role="user", content=AUDIO_PLACEHOLDER.format(mime_type=mime_type)
                    )
                    return await self._exchange(chat_id, request=request, record=record)
            case Unsupported(reason=reason):
                logger.debug(f"Unsupported content ({reason}), using fallback emoji")
                return self.fallback_emoji

    def restrict(self, emoji: str, supported: Collection[str] | None) -> str:
        """Map *emoji* onto a platform's allowed reaction set.

        Returns the platform's spelling of the emoji, or the fallback when
        the platform does not accept it. ``None`` means anything goes.
        """
        if supported is None:
            return emoji
        if emoji in supported:
            return emoji
        bare = strip_variation_selectors(emoji)
        for candidate in supported:
            if strip_variation_selectors(candidate) == bare:
                return candidate
        logger.info(f"Emoji {emoji} not accepted by platform, using fallback")
        return self.fallback_emoji

    async def _exchange(self, chat_id: str, request: Turn, record: Turn) -> str:
        async with self.conversations.acquire(chat_id) as ctx:
            response = await self.provider.chat(
                ctx.messages(pending=request),
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            emoji = extract_emoji(response.content)
            if emoji is None:
                logger.warning(
                    f"No emoji in model reply {response.content!r}, using fallback"
                )
                emoji = self.fallback_emoji
            ctx.append_exchange(record, Turn(role="model", content=emoji))
        return emoji

    @asynccontextmanager
    async def _uploaded(self, path: Path, mime_type: str) -> AsyncIterator[UploadedFile]:
        """Upload *path* for the duration of the block, deleting it on every exit path."""
        try:
            file = await self.provider.upload_file(path, mime_type)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Upload of {path.name} failed: {e}") from e
        try:
            yield file
        finally:
            try:
                await self.provider.delete_file(file)
            except Exception as e:
                logger.warning(f"Failed to delete uploaded file {file.name}: {e}")
