"""Gemini Files API client (upload / delete) over httpx."""

from __future__ import annotations

from pathlib import Path

import httpx
from loguru import logger

from reactbot.errors import GenerationError
from reactbot.providers.base import UploadedFile

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"


class GeminiFileStore:
    """Uploads media to Gemini's file store using the resumable protocol.

    Uploaded files are referenced from chat requests by URI and removed with
    :meth:`delete` once the request is done.
    """

    def __init__(
        self,
        api_key: str,
        api_base: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.api_base = (api_base or DEFAULT_API_BASE).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"x-goog-api-key": self.api_key},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def upload(self, path: Path, mime_type: str) -> UploadedFile:
        path = Path(path)
        if not path.exists():
            raise GenerationError(f"Upload source not found: {path}")

        data = path.read_bytes()
        try:
            async with self._client() as client:
                start = await client.post(
                    f"{self.api_base}/upload/v1beta/files",
                    headers={
                        "X-Goog-Upload-Protocol": "resumable",
                        "X-Goog-Upload-Command": "start",
                        "X-Goog-Upload-Header-Content-Length": str(len(data)),
                        "X-Goog-Upload-Header-Content-Type": mime_type,
                    },
                    json={"file": {"display_name": path.name}},
                )
                start.raise_for_status()
                upload_url = start.headers.get("x-goog-upload-url")
                if not upload_url:
                    raise GenerationError("Gemini upload did not return an upload URL")

                response = await client.post(
                    upload_url,
                    headers={
                        "X-Goog-Upload-Offset": "0",
                        "X-Goog-Upload-Command": "upload, finalize",
                        "Content-Type": mime_type,
                    },
                    content=data,
                )
                response.raise_for_status()
                info = response.json().get("file", {})
        except GenerationError:
            raise
        except httpx.HTTPStatusError as e:
            detail = f"Gemini upload {e.response.status_code}: {e.response.text[:200]}"
            logger.error(detail)
            raise GenerationError(detail) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Gemini upload failed: {e}") from e

        if not info.get("name") or not info.get("uri"):
            raise GenerationError("Gemini upload returned no file reference")

        logger.debug(f"Uploaded {path.name} to Gemini as {info['name']}")
        return UploadedFile(
            name=info["name"],
            uri=info["uri"],
            mime_type=info.get("mimeType") or mime_type,
        )

    async def delete(self, file: UploadedFile) -> None:
        try:
            async with self._client() as client:
                response = await client.delete(f"{self.api_base}/v1beta/{file.name}")
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GenerationError(
                f"Gemini delete {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Gemini delete failed: {e}") from e
        logger.debug(f"Deleted Gemini file {file.name}")
