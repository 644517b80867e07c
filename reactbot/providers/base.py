"""Base LLM provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str | None
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)


@dataclass
class UploadedFile:
    """A file held by the provider's file store."""
    name: str  # Provider resource name, used for deletion (e.g. "files/abc123")
    uri: str  # Reference placed in chat requests
    mime_type: str


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Implementations should handle the specifics of each provider's API
    while maintaining a consistent interface. Failures are raised as
    ``GenerationError``.
    """

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key
        self.default_temperature: float = 1.0
        self.default_max_tokens: int = 16

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model identifier (provider-specific).
            max_tokens: Maximum tokens in response (uses provider default if None).
            temperature: Sampling temperature (uses provider default if None).

        Returns:
            LLMResponse with the reply text.
        """

    @abstractmethod
    async def upload_file(self, path: Path, mime_type: str) -> UploadedFile:
        """Upload a local file so later chat requests can reference it."""

    @abstractmethod
    async def delete_file(self, file: UploadedFile) -> None:
        """Delete a previously uploaded file."""

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default model for this provider."""

    @staticmethod
    def file_part(file: UploadedFile) -> dict[str, Any]:
        """Content part referencing an uploaded file."""
        return {"type": "file", "file": {"file_id": file.uri, "format": file.mime_type}}

    @staticmethod
    def image_part(data_url: str) -> dict[str, Any]:
        """Content part carrying an inline image as a data URL."""
        return {"type": "image_url", "image_url": {"url": data_url}}
