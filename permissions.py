"""Desktop microphone permission check.

Desktop platforms do not expose a permission prompt to PortAudio; the
closest equivalent is whether the default input device accepts the
capture settings.
"""

from __future__ import annotations

import asyncio
import logging

from interfaces import PermissionResult
from models import CaptureConfig

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDevicePermissionProvider:
    def __init__(self, config: CaptureConfig = CaptureConfig()) -> None:
        self._config = config

    async def request_recording_permission(self) -> PermissionResult:
        return await asyncio.to_thread(self._check)

    def _check(self) -> PermissionResult:
        if sd is None:
            raise RuntimeError("sounddevice is not installed")
        try:
            device = sd.query_devices(kind="input")
            sd.check_input_settings(
                samplerate=self._config.sample_rate,
                channels=self._config.channels,
                dtype="int16",
            )
        except (sd.PortAudioError, ValueError) as exc:
            logger.info("Input device unavailable: %s", exc)
            return {"granted": False}
        logger.debug("Input device: %s", device.get("name") if isinstance(device, dict) else device)
        return {"granted": True}
