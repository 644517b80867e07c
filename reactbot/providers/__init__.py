"""LLM provider abstraction module."""

from reactbot.providers.base import LLMProvider, LLMResponse, UploadedFile
from reactbot.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LLMResponse", "UploadedFile", "LiteLLMProvider"]
