"""Speech-to-speech conversion over HTTP.

The recorded WAV file is posted as a multipart ``audio`` field. The
service answers with JSON holding the converted clip as base64 in an
``audio`` field, which is written to the local cache as a new artifact.

There is no timeout and no retry: a failed conversion is reported and
abandoned, and the user starts a new one.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from errors import (
    CONVERSION_INVALID_AUDIO,
    CONVERSION_MISSING_AUDIO,
    CONVERSION_NETWORK_ERROR,
    CONVERSION_SERVER_ERROR,
    SOURCE_UNREADABLE,
    AudioFlowError,
)
from interfaces import ArtifactCache
from models import AudioArtifact, now_ms

logger = logging.getLogger(__name__)

AUDIO_FIELD = "audio"
AUDIO_CONTENT_TYPE = "audio/wav"


def _decoded_size(payload: str) -> int:
    return len(payload) * 3 // 4 - payload[-2:].count("=")


def _server_error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class HttpConversionClient:
    def __init__(
        self,
        endpoint: str,
        cache: ArtifactCache,
        client: Optional[httpx.AsyncClient] = None,
        extension: str = "wav",
    ) -> None:
        self._endpoint = endpoint
        self._cache = cache
        self._extension = extension
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=None)

    async def convert(self, artifact: AudioArtifact) -> AudioArtifact:
        try:
            payload = await asyncio.to_thread(Path(artifact.locator).read_bytes)
        except OSError as exc:
            raise AudioFlowError(SOURCE_UNREADABLE) from exc

        filename = f"recording-{now_ms()}.{self._extension}"
        files = {AUDIO_FIELD: (filename, payload, AUDIO_CONTENT_TYPE)}
        logger.info("Uploading %s (%d bytes) to %s", filename, len(payload), self._endpoint)
        try:
            response = await self._client.post(
                self._endpoint,
                files=files,
                headers={"Accept": "application/json"},
            )
        except httpx.InvalidURL as exc:
            raise AudioFlowError(CONVERSION_NETWORK_ERROR, f"Invalid endpoint: {exc}") from exc
        except httpx.HTTPError as exc:
            raise AudioFlowError(CONVERSION_NETWORK_ERROR, f"Network error: {exc}") from exc

        if not response.is_success:
            logger.warning("Conversion endpoint answered %d", response.status_code)
            raise AudioFlowError(CONVERSION_SERVER_ERROR, _server_error_message(response))

        try:
            data = response.json()
        except ValueError as exc:
            raise AudioFlowError(CONVERSION_MISSING_AUDIO) from exc
        audio = data.get(AUDIO_FIELD) if isinstance(data, dict) else None
        if not isinstance(audio, str) or not audio:
            raise AudioFlowError(CONVERSION_MISSING_AUDIO)

        name = f"processed-{now_ms()}.wav"
        try:
            locator = await self._cache.write(name, audio)
        except (ValueError, OSError) as exc:
            logger.warning("Could not store converted audio: %s", exc)
            raise AudioFlowError(CONVERSION_INVALID_AUDIO) from exc

        logger.info("Converted audio saved at %s", locator)
        return AudioArtifact(locator=locator, size_hint=_decoded_size(audio))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
