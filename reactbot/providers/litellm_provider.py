"""LiteLLM provider implementation for multi-provider support."""

import os
from pathlib import Path
from typing import Any

import litellm
from litellm import acompletion

from reactbot.errors import GenerationError
from reactbot.providers.base import LLMProvider, LLMResponse, UploadedFile
from reactbot.providers.gemini_files import GeminiFileStore


class LiteLLMProvider(LLMProvider):
    """
    LLM provider using LiteLLM for chat completions.

    Audio reactions need a file store; one is created automatically for
    Gemini models, other backends must be given one explicitly.
    """

    def __init__(
        self,
        api_key: str | None = None,
        default_model: str = "gemini/gemini-2.5-flash",
        api_base: str | None = None,
        request_timeout: float = 60.0,
        file_store: GeminiFileStore | None = None,
    ):
        super().__init__(api_key)
        self.default_model = default_model
        self.api_base = api_base
        self.request_timeout = request_timeout

        # Configure LiteLLM env vars based on provider
        if api_key:
            if "gemini" in default_model.lower():
                os.environ.setdefault("GEMINI_API_KEY", api_key)
            elif "anthropic" in default_model:
                os.environ.setdefault("ANTHROPIC_API_KEY", api_key)
            elif "openai" in default_model or "gpt" in default_model:
                os.environ.setdefault("OPENAI_API_KEY", api_key)

        if file_store is None and api_key and "gemini" in default_model.lower():
            file_store = GeminiFileStore(api_key, timeout=request_timeout)
        self.file_store = file_store

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """
        Send a chat completion request via LiteLLM.

        Raises:
            GenerationError: If the call fails or returns no choices.
        """
        model = model or self.default_model
        max_tokens = max_tokens if max_tokens is not None else self.default_max_tokens
        temperature = temperature if temperature is not None else self.default_temperature

        # For Gemini, ensure gemini/ prefix if not already present
        if "gemini" in model.lower() and not model.startswith("gemini/"):
            model = f"gemini/{model}"

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "timeout": self.request_timeout,
        }
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            raise GenerationError(f"Error calling LLM: {e}") from e
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> LLMResponse:
        """Parse LiteLLM response into our standard format."""
        if not getattr(response, "choices", None):
            raise GenerationError("LLM returned no choices")
        choice = response.choices[0]

        usage = {}
        if hasattr(response, "usage") and response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=choice.message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
        )

    async def upload_file(self, path: Path, mime_type: str) -> UploadedFile:
        if not self.file_store:
            raise GenerationError(f"No file store configured for model '{self.default_model}'")
        return await self.file_store.upload(path, mime_type)

    async def delete_file(self, file: UploadedFile) -> None:
        if not self.file_store:
            raise GenerationError(f"No file store configured for model '{self.default_model}'")
        await self.file_store.delete(file)

    def get_default_model(self) -> str:
        """Get the default model."""
        return self.default_model
