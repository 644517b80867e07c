"""Telegram channel implementation using python-telegram-bot."""

from datetime import datetime

from loguru import logger
from telegram import Message, ReactionTypeEmoji, Update, User
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from reactbot.bus.events import EventKind, InboundEvent, MediaKind
from reactbot.channels.base import BaseChannel
from reactbot.config.schema import TelegramConfig
from reactbot.errors import DeliveryError, TransportError

# Emoji a bot may use with setMessageReaction
VALID_TELEGRAM_REACTIONS = frozenset({
    "👍", "👎", "❤", "🔥", "🥰", "👏", "😁", "🤔", "🤯", "😱", "🤬", "😢",
    "🎉", "🤩", "🤮", "💩", "🙏", "👌", "🕊", "🤡", "🥱", "🥴", "😍", "🐳",
    "❤‍🔥", "🌚", "🌭", "💯", "🤣", "⚡", "🍌", "🏆", "💔", "🤨", "😐", "🍓",
    "🍾", "💋", "🖕", "😈", "😴", "😭", "🤓", "👻", "👨‍💻", "👀", "🎃", "🙈",
    "😇", "😨", "🤝", "✍", "🤗", "🫡", "🎅", "🎄", "☃", "💅", "🤪", "🗿",
    "🆒", "💘", "🙉", "🦄", "😘", "💊", "🙊", "😎", "👾", "🤷‍♂", "🤷", "🤷‍♀",
    "😡",
})

TELEGRAM_MAX_LENGTH = 4096


def _split_plain_text(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Split plain text into chunks that fit Telegram's message limit."""
    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    remaining = text
    min_pos = max_length // 4

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        pos = remaining.rfind('\n\n', 0, max_length)
        if pos <= min_pos:
            pos = remaining.rfind('\n', 0, max_length)
        if pos <= min_pos:
            pos = remaining.rfind(' ', 0, max_length)
        if pos <= min_pos:
            pos = max_length

        chunks.append(remaining[:pos])
        remaining = remaining[pos:].lstrip('\n')

    return chunks


def _sender_id(user: User) -> str:
    # Stable numeric ID, plus username for allowlist compatibility
    sender_id = str(user.id)
    if user.username:
        sender_id = f"{sender_id}|{user.username}"
    return sender_id


def _classify_message(message: Message) -> tuple[EventKind, MediaKind | None, str, str | None]:
    """Return (kind, media_kind, mime_type, media_ref) for a Telegram message."""
    if message.text:
        return EventKind.TEXT, None, "", None

    if message.photo:
        # Largest resolution; Telegram photos are always JPEG
        return EventKind.MEDIA, MediaKind.IMAGE, "image/jpeg", message.photo[-1].file_id

    if message.voice:
        return EventKind.MEDIA, MediaKind.AUDIO, message.voice.mime_type or "audio/ogg", message.voice.file_id

    if message.audio:
        return EventKind.MEDIA, MediaKind.AUDIO, message.audio.mime_type or "audio/mpeg", message.audio.file_id

    # Animations also populate message.document, so check them first
    if message.animation:
        return EventKind.MEDIA, MediaKind.OTHER, message.animation.mime_type or "video/mp4", message.animation.file_id

    if message.document:
        doc = message.document
        mime = doc.mime_type or ""
        if mime.startswith("image/"):
            media_kind = MediaKind.IMAGE
        elif mime.startswith("audio/"):
            media_kind = MediaKind.AUDIO
        else:
            media_kind = MediaKind.OTHER
        return EventKind.MEDIA, media_kind, mime, doc.file_id

    if message.video:
        return EventKind.MEDIA, MediaKind.OTHER, message.video.mime_type or "video/mp4", message.video.file_id

    if message.video_note:
        return EventKind.MEDIA, MediaKind.OTHER, "video/mp4", message.video_note.file_id

    if message.sticker:
        mime = "video/webm" if message.sticker.is_video else "image/webp"
        return EventKind.MEDIA, MediaKind.OTHER, mime, message.sticker.file_id

    return EventKind.OTHER, None, "", None


def message_to_event(message: Message, user: User) -> InboundEvent:
    """Convert a Telegram message into an :class:`InboundEvent`."""
    kind, media_kind, mime_type, media_ref = _classify_message(message)

    text = message.text or message.caption or ""
    # Formatted text (links, mentions, markup) is the "extended" body
    extended_text = message.text if message.text and message.entities else None

    return InboundEvent(
        channel=TelegramChannel.name,
        message_id=str(message.message_id),
        sender_id=_sender_id(user),
        chat_id=str(message.chat_id),
        kind=kind,
        media_kind=media_kind,
        mime_type=mime_type,
        text=text,
        extended_text=extended_text,
        media_ref=media_ref,
        timestamp=message.date or datetime.now(),
        metadata={
            "user_id": user.id,
            "username": user.username,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "is_group": message.chat.type != "private",
        },
    )


class TelegramChannel(BaseChannel):
    """
    Telegram channel using long polling.

    Updates are processed concurrently, so events from different chats can
    be in flight at the same time.
    """

    name = "telegram"
    supported_reactions = VALID_TELEGRAM_REACTIONS

    def __init__(self, config: TelegramConfig):
        super().__init__(config)
        self.config: TelegramConfig = config
        self._app: Application | None = None

    async def start(self) -> None:
        """Connect and start long polling. Returns once polling is running.

        Raises:
            TransportError: If the token is missing or the connection fails.
        """
        if not self.config.token:
            raise TransportError("Telegram bot token not configured")

        builder = Application.builder().token(self.config.token)
        if self.config.concurrent_updates:
            builder = builder.concurrent_updates(True)
        if self.config.proxy:
            builder = builder.proxy(self.config.proxy).get_updates_proxy(self.config.proxy)
        self._app = builder.build()

        self._app.add_handler(MessageHandler(filters.ALL & ~filters.COMMAND, self._on_message))

        logger.info("Starting Telegram bot (polling mode)...")
        try:
            await self._app.initialize()
            await self._app.start()
            bot_info = await self._app.bot.get_me()
            await self._app.updater.start_polling(
                allowed_updates=["message"],
                drop_pending_updates=True  # Ignore old messages on startup
            )
        except TelegramError as e:
            raise TransportError(f"Failed to connect to Telegram: {e}") from e

        self._running = True
        logger.info(f"Telegram bot @{bot_info.username} connected")

    async def stop(self) -> None:
        """Stop polling and disconnect."""
        self._running = False

        if self._app:
            logger.info("Stopping Telegram bot...")
            if self._app.updater and self._app.updater.running:
                await self._app.updater.stop()
            if self._app.running:
                await self._app.stop()
            await self._app.shutdown()
            self._app = None

    async def download_media(self, event: InboundEvent) -> bytes:
        if not self._app:
            raise TransportError("Telegram bot not running")
        if not event.media_ref:
            raise TransportError(f"Message {event.key} has no downloadable media")
        try:
            file = await self._app.bot.get_file(event.media_ref)
            data = await file.download_as_bytearray()
        except TelegramError as e:
            raise TransportError(f"Failed to download media for {event.key}: {e}") from e
        return bytes(data)

    async def send_message(self, chat_id: str, content: str) -> None:
        if not self._app:
            raise TransportError("Telegram bot not running")
        try:
            for chunk in _split_plain_text(content):
                await self._app.bot.send_message(chat_id=int(chat_id), text=chunk)
        except (TelegramError, ValueError) as e:
            raise TransportError(f"Error sending Telegram message to {chat_id}: {e}") from e

    async def send_reaction(
        self, chat_id: str, sender_id: str, message_id: str, emoji: str
    ) -> None:
        # Telegram reactions address the message by chat + id; sender is implied
        if not self._app:
            raise DeliveryError("Telegram bot not running")
        try:
            await self._app.bot.set_message_reaction(
                chat_id=int(chat_id),
                message_id=int(message_id),
                reaction=[ReactionTypeEmoji(emoji=emoji)],
            )
        except (TelegramError, ValueError) as e:
            raise DeliveryError(f"Error setting reaction {emoji} on {chat_id}/{message_id}: {e}") from e

    async def _on_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle any incoming non-command message."""
        if not update.message or not update.effective_user:
            return

        event = message_to_event(update.message, update.effective_user)
        logger.debug(f"Telegram {event.kind.value} message from {event.sender_id} in {event.chat_id}")
        await self._emit(event)
