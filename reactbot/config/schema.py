"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TelegramConfig(BaseModel):
    """Telegram channel configuration."""
    token: str = ""  # Bot token from @BotFather
    allow_from: list[str] = Field(default_factory=list)  # Allowed user IDs or usernames
    proxy: str | None = None  # HTTP/SOCKS5 proxy URL, e.g. "socks5://127.0.0.1:1080"
    concurrent_updates: bool = True  # Process updates from different chats in parallel


class ChannelsConfig(BaseModel):
    """Configuration for chat channels."""
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)


class ProviderConfig(BaseModel):
    """LLM provider configuration."""
    api_key: str = ""
    api_base: str | None = None


class ProvidersConfig(BaseModel):
    """Configuration for LLM providers."""
    gemini: ProviderConfig = Field(default_factory=ProviderConfig)
    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    anthropic: ProviderConfig = Field(default_factory=ProviderConfig)


class ReactionConfig(BaseModel):
    """Reaction generation settings."""
    model: str = "gemini/gemini-2.5-flash"
    max_tokens: int = 16
    temperature: float = 1.0
    fallback_emoji: str = "🤷"
    history_mode: Literal["per_chat", "shared"] = "per_chat"
    max_history_turns: int = 200  # 0 keeps everything
    max_chats: int = 1000  # Per-chat contexts kept in memory; 0 is unbounded
    request_timeout: float = 60.0


class MediaConfig(BaseModel):
    """Attachment storage settings."""
    directory: str = "~/.reactbot/media"


class DispatchConfig(BaseModel):
    """Event dispatcher settings."""
    listener_timeout: float = 120.0  # Seconds per listener; 0 disables the deadline


class Config(BaseSettings):
    """Root configuration for reactbot."""
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    reaction: ReactionConfig = Field(default_factory=ReactionConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)

    model_config = SettingsConfigDict(
        env_prefix="REACTBOT_",
        env_nested_delimiter="__",
    )

    @property
    def media_path(self) -> Path:
        """Get expanded media directory path."""
        return Path(self.media.directory).expanduser()

    @property
    def provider_name(self) -> str:
        model = self.reaction.model
        return model.split("/")[0] if "/" in model else "gemini"

    def get_provider(self) -> ProviderConfig | None:
        """Provider config matching the reaction model's prefix."""
        return getattr(self.providers, self.provider_name, None)

    def get_api_key(self) -> str | None:
        provider = self.get_provider()
        return provider.api_key or None if provider else None

    def get_api_base(self) -> str | None:
        provider = self.get_provider()
        return provider.api_base if provider else None
