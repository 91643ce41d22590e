"""Microphone recorder adapter."""

from __future__ import annotations

import asyncio
import logging
import threading
import wave
from pathlib import Path
from typing import Any

from cache import LocalArtifactCache
from interfaces import CaptureResult
from models import CaptureConfig, now_ms

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDeviceRecorder:
    """Captures int16 PCM and finalizes it as a WAV file in the cache.

    WAV is lossless, so ``CaptureConfig.bit_rate`` has no effect here; the
    bit rate follows from sample rate, width and channel count.
    """

    def __init__(self, cache: LocalArtifactCache, chunk_ms: int = 100) -> None:
        self._cache = cache
        self.chunk_ms = chunk_ms
        self._config = CaptureConfig()
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self._chunks: list[bytes] = []

    async def prepare(self, config: CaptureConfig) -> None:
        with self._lock:
            if self._running:
                return
            self._config = config
            self._chunks = []

    async def start(self) -> None:
        await asyncio.to_thread(self._open_stream)

    async def stop(self) -> CaptureResult:
        pcm = await asyncio.to_thread(self._close_stream)
        if not pcm:
            logger.warning("Recording stopped without any captured audio")
            return {"locator": None}
        path = self._cache.path_for(f"recording-{now_ms()}.{self._config.container}")
        await asyncio.to_thread(self._write_wav, path, pcm)
        return {"locator": str(path)}

    def _open_stream(self) -> None:
        with self._lock:
            if self._running:
                return
            if sd is None:
                raise RuntimeError("sounddevice is not installed")
            blocksize = int(self._config.sample_rate * (self.chunk_ms / 1000.0))
            self._stream = sd.InputStream(
                samplerate=self._config.sample_rate,
                channels=self._config.channels,
                dtype="int16",
                blocksize=blocksize,
                callback=self._on_audio,
            )
            try:
                self._stream.start()
            except Exception:
                self._stream.close()
                self._stream = None
                raise
            self._running = True

    def _close_stream(self) -> bytes:
        with self._lock:
            self._running = False
            if self._stream is not None:
                self._stream.stop()
                self._stream.close()
                self._stream = None
            pcm = b"".join(self._chunks)
            self._chunks = []
            return pcm

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if not self._running or np is None:
            return
        if status:
            logger.debug("Input stream status: %s", status)
        self._chunks.append(np.asarray(indata, dtype=np.int16).tobytes())

    def _write_wav(self, path: Path, pcm: bytes) -> None:
        with wave.open(str(path), "wb") as wf:
            wf.setnchannels(self._config.channels)
            wf.setsampwidth(self._config.sample_width)
            wf.setframerate(self._config.sample_rate)
            wf.writeframes(pcm)
