"""Microphone authorization gate."""

from __future__ import annotations

import logging

from errors import PERMISSION_CHECK_FAILED, PERMISSION_DENIED, AudioFlowError
from interfaces import PermissionProvider
from models import PermissionState

logger = logging.getLogger(__name__)


class PermissionGate:
    def __init__(self, provider: PermissionProvider) -> None:
        self._provider = provider
        self._state = PermissionState.UNKNOWN

    @property
    def state(self) -> PermissionState:
        return self._state

    @property
    def granted(self) -> bool:
        return self._state == PermissionState.GRANTED

    async def request_permission(self) -> PermissionState:
        """Ask the platform once; the answer holds for the whole session.

        A failing check counts as a denial. Later calls return the stored
        state without asking again.
        """
        if self._state != PermissionState.UNKNOWN:
            return self._state
        try:
            result = await self._provider.request_recording_permission()
        except Exception as exc:
            logger.warning("Permission check failed: %s", exc, exc_info=True)
            self._state = PermissionState.DENIED
            raise AudioFlowError(PERMISSION_CHECK_FAILED) from exc

        self._state = PermissionState.GRANTED if result.get("granted") else PermissionState.DENIED
        logger.info("Microphone permission: %s", self._state.value)
        return self._state

    def require(self) -> None:
        """Raise unless recording is authorized."""
        if self._state != PermissionState.GRANTED:
            raise AudioFlowError(PERMISSION_DENIED)
