"""Conversation orchestration: record, convert and play audio clips."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from errors import (
    CONVERSION_BUSY,
    ERROR_MESSAGES,
    NO_RECORDING,
    PERMISSION_DENIED,
    RECORDING_IN_PROGRESS,
    AudioFlowError,
)
from history import MessageHistory
from interfaces import CaptureDevice, ConversionService, PermissionProvider, Player
from models import (
    AudioArtifact,
    CaptureConfig,
    Direction,
    MessageEntry,
    PermissionState,
    RecordingStatus,
    new_entry,
)
from permission_gate import PermissionGate
from playback_controller import PlaybackController
from recording_session import DEFAULT_CAPTURE_CONFIG, RecordingSession

logger = logging.getLogger(__name__)

StateCallback = Callable[[RecordingStatus, RecordingStatus], None]
PermissionCallback = Callable[[PermissionState], None]
BusyCallback = Callable[[bool], None]
HistoryCallback = Callable[[Sequence[MessageEntry]], None]
PlaybackCallback = Callable[[Optional[str]], None]
ErrorCallback = Callable[[str, str], None]


class ConversationController:
    """Runs every user action and reports failures through ``on_error``.

    Errors from the components are caught here, at the boundary of the
    action that triggered them, and never escape to the caller. This is
    also where user actions are serialized: one conversion at a time, no
    submit while recording.
    """

    def __init__(
        self,
        permission_provider: PermissionProvider,
        capture_device: CaptureDevice,
        converter: ConversionService,
        player: Player,
        capture_config: CaptureConfig = DEFAULT_CAPTURE_CONFIG,
        on_state_change: Optional[StateCallback] = None,
        on_permission_change: Optional[PermissionCallback] = None,
        on_busy_change: Optional[BusyCallback] = None,
        on_history_change: Optional[HistoryCallback] = None,
        on_playback_change: Optional[PlaybackCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._converter = converter
        self._on_permission_change = on_permission_change
        self._on_busy_change = on_busy_change
        self._on_history_change = on_history_change
        self._on_error = on_error

        self.gate = PermissionGate(permission_provider)
        self.session = RecordingSession(
            capture_device,
            self.gate,
            config=capture_config,
            on_state_change=on_state_change,
        )
        self.history = MessageHistory()
        self.playback = PlaybackController(player, on_active_change=on_playback_change)

        self._last_sent: Optional[AudioArtifact] = None
        self._converting = False
        self._operation = 0
        self._closed = False

    @property
    def converting(self) -> bool:
        return self._converting

    @property
    def last_sent(self) -> Optional[AudioArtifact]:
        return self._last_sent

    @property
    def can_record(self) -> bool:
        return self.gate.granted and not self._closed and not self.session.stopping

    @property
    def can_submit(self) -> bool:
        return (
            not self._closed
            and not self._converting
            and self._last_sent is not None
            and self.session.status == RecordingStatus.IDLE
        )

    async def initialize(self) -> PermissionState:
        try:
            state = await self.gate.request_permission()
        except AudioFlowError as exc:
            self._emit_error(exc.code, exc.message)
            state = self.gate.state
        else:
            if state == PermissionState.DENIED:
                self._emit_error(PERMISSION_DENIED, ERROR_MESSAGES[PERMISSION_DENIED])
        if self._on_permission_change:
            self._on_permission_change(state)
        return state

    async def toggle_recording(self) -> None:
        if self.session.status == RecordingStatus.RECORDING:
            await self.stop_recording()
        else:
            await self.start_recording()

    async def start_recording(self) -> None:
        if self._closed:
            return
        try:
            await self.session.start()
        except AudioFlowError as exc:
            self._emit_error(exc.code, exc.message)
            return
        self._last_sent = None

    async def stop_recording(self) -> None:
        if self.session.status != RecordingStatus.RECORDING or self.session.stopping:
            return
        try:
            artifact = await self.session.stop()
        except AudioFlowError as exc:
            self._emit_error(exc.code, exc.message)
            return
        if self._closed:
            return

        self.history.append(new_entry(artifact, Direction.SENT))
        self.session.release_artifact()
        self._last_sent = artifact
        self._emit_history()

    async def submit(self) -> None:
        """Convert the last recorded clip and append the reply."""
        if self._closed:
            return
        if self.session.status == RecordingStatus.RECORDING:
            self._emit_error(RECORDING_IN_PROGRESS, ERROR_MESSAGES[RECORDING_IN_PROGRESS])
            return
        source = self._last_sent
        if source is None:
            self._emit_error(NO_RECORDING, ERROR_MESSAGES[NO_RECORDING])
            return
        if self._converting:
            self._emit_error(CONVERSION_BUSY, ERROR_MESSAGES[CONVERSION_BUSY])
            return

        self._operation += 1
        operation = self._operation
        self._set_converting(True)
        try:
            result = await self._converter.convert(source)
        except AudioFlowError as exc:
            if operation == self._operation:
                self._emit_error(exc.code, exc.message)
            return
        finally:
            if operation == self._operation:
                self._set_converting(False)

        if operation != self._operation:
            logger.info("Discarding stale conversion result %s", result.locator)
            return
        self.history.append(new_entry(result, Direction.RECEIVED))
        self._emit_history()

    async def toggle_playback(self, locator: str) -> None:
        try:
            await self.playback.toggle(locator)
        except AudioFlowError as exc:
            self._emit_error(exc.code, exc.message)

    async def shutdown(self) -> None:
        """Stop capture and playback, then release the HTTP client."""
        if self._closed:
            return
        self._closed = True
        self._operation += 1
        self._set_converting(False)
        await self.session.abort()
        await self.playback.shutdown()
        await self._converter.aclose()

    def _set_converting(self, value: bool) -> None:
        if self._converting == value:
            return
        self._converting = value
        if self._on_busy_change:
            self._on_busy_change(value)

    def _emit_history(self) -> None:
        if self._on_history_change:
            self._on_history_change(self.history.list())

    def _emit_error(self, code: str, message: str) -> None:
        logger.warning("%s: %s", code, message)
        if self._on_error:
            self._on_error(code, message)
