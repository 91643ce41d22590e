"""Single-instance record -> stop -> artifact state machine."""

from __future__ import annotations

import logging
from typing import Callable, ClassVar, Optional

from errors import (
    RECORDING_ALREADY_ACTIVE,
    RECORDING_FAILED,
    RECORDING_NO_ARTIFACT,
    AudioFlowError,
    RecordingStateError,
)
from interfaces import CaptureDevice
from models import AudioArtifact, CaptureConfig, RecordingStatus
from permission_gate import PermissionGate

logger = logging.getLogger(__name__)

StateCallback = Callable[[RecordingStatus, RecordingStatus], None]

DEFAULT_CAPTURE_CONFIG = CaptureConfig()


class RecordingSession:
    # The microphone holder across every session in the process.
    _microphone_owner: ClassVar[Optional["RecordingSession"]] = None

    def __init__(
        self,
        device: CaptureDevice,
        gate: PermissionGate,
        config: CaptureConfig = DEFAULT_CAPTURE_CONFIG,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self._device = device
        self._gate = gate
        self._config = config
        self._on_state_change = on_state_change
        self._status = RecordingStatus.IDLE
        self._pending_artifact: Optional[AudioArtifact] = None
        self._stopping = False

    @property
    def status(self) -> RecordingStatus:
        return self._status

    @property
    def stopping(self) -> bool:
        return self._stopping

    @property
    def pending_artifact(self) -> Optional[AudioArtifact]:
        return self._pending_artifact

    @property
    def config(self) -> CaptureConfig:
        return self._config

    async def start(self) -> None:
        owner = RecordingSession._microphone_owner
        if self._status == RecordingStatus.RECORDING or owner is not None:
            raise AudioFlowError(RECORDING_ALREADY_ACTIVE)
        self._gate.require()

        # Claim before the first await so an interleaved start() sees it.
        RecordingSession._microphone_owner = self
        try:
            await self._device.prepare(self._config)
            await self._device.start()
        except Exception as exc:
            self._release_microphone()
            logger.warning("Microphone start failed: %s", exc, exc_info=True)
            raise AudioFlowError(RECORDING_FAILED, str(exc) or None) from exc

        self._pending_artifact = None
        self._transition(RecordingStatus.RECORDING)

    async def stop(self) -> AudioArtifact:
        """Finalize the capture and hand back the finished artifact.

        Calling this while Idle is a caller bug, not a runtime condition.
        """
        if self._status != RecordingStatus.RECORDING:
            raise RecordingStateError("stop() called without an active recording")
        if self._stopping:
            raise RecordingStateError("stop() called while the recording is already stopping")

        # Mark before the first await so an interleaved stop() sees it.
        self._stopping = True
        try:
            result = await self._device.stop()
        except Exception as exc:
            logger.warning("Microphone stop failed: %s", exc, exc_info=True)
            raise AudioFlowError(RECORDING_FAILED, str(exc) or "Failed to stop recording") from exc
        finally:
            self._stopping = False
            self._release_microphone()
            self._transition(RecordingStatus.IDLE)

        locator = result.get("locator") if result else None
        if not locator:
            raise AudioFlowError(RECORDING_NO_ARTIFACT)

        artifact = AudioArtifact(locator=locator)
        self._pending_artifact = artifact
        logger.info("Recording saved at %s", locator)
        return artifact

    def release_artifact(self) -> Optional[AudioArtifact]:
        """Give up ownership of the finished artifact once it is in history."""
        artifact = self._pending_artifact
        self._pending_artifact = None
        return artifact

    async def abort(self) -> None:
        """Stop an active capture and discard whatever it produced."""
        if self._status != RecordingStatus.RECORDING or self._stopping:
            return
        try:
            await self._device.stop()
        except Exception as exc:
            logger.warning("Microphone stop during teardown failed: %s", exc)
        finally:
            self._release_microphone()
            self._pending_artifact = None
            self._transition(RecordingStatus.IDLE)

    def _release_microphone(self) -> None:
        if RecordingSession._microphone_owner is self:
            RecordingSession._microphone_owner = None

    def _transition(self, to_state: RecordingStatus) -> None:
        from_state = self._status
        if from_state == to_state:
            return
        self._status = to_state
        logger.debug("Recording %s -> %s", from_state.value, to_state.value)
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
