"""Shared audio output adapter."""

from __future__ import annotations

import asyncio
import logging
import wave
from typing import Any, Optional

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


def read_wav(path: str) -> tuple[Any, int]:
    """Load a 16-bit WAV file as an int16 array of shape (frames, channels)."""
    if np is None:
        raise RuntimeError("numpy is not installed")
    with wave.open(path, "rb") as wf:
        if wf.getsampwidth() != 2:
            raise ValueError(f"unsupported sample width: {wf.getsampwidth()}")
        channels = wf.getnchannels()
        rate = wf.getframerate()
        raw = wf.readframes(wf.getnframes())
    data = np.frombuffer(raw, dtype=np.int16).reshape(-1, channels)
    return data, rate


class SoundDevicePlayer:
    def __init__(self) -> None:
        self._data: Any = None
        self._sample_rate: Optional[int] = None
        self.locator: Optional[str] = None

    async def replace(self, locator: str) -> None:
        data, rate = await asyncio.to_thread(read_wav, locator)
        self._data = data
        self._sample_rate = rate
        self.locator = locator
        logger.debug("Loaded %s (%d frames at %d Hz)", locator, len(data), rate)

    async def play(self) -> None:
        if sd is None:
            raise RuntimeError("sounddevice is not installed")
        if self._data is None:
            raise RuntimeError("no audio loaded")
        await asyncio.to_thread(sd.play, self._data, self._sample_rate)

    async def pause(self) -> None:
        if sd is None:
            return
        await asyncio.to_thread(sd.stop)
