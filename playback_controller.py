"""Single-active-stream playback over one shared player."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from errors import PLAYBACK_FAILED, AudioFlowError
from interfaces import Player

logger = logging.getLogger(__name__)

ActiveCallback = Callable[[Optional[str]], None]


class PlaybackController:
    """Owns the player; nothing else may touch it.

    Toggling the active locator stops it and clears it, so toggling it
    again starts from the beginning.
    """

    def __init__(self, player: Player, on_active_change: Optional[ActiveCallback] = None) -> None:
        self._player = player
        self._on_active_change = on_active_change
        self._active_locator: Optional[str] = None
        self._generation = 0
        self._closed = False

    @property
    def active_locator(self) -> Optional[str]:
        return self._active_locator

    async def toggle(self, locator: str) -> None:
        if self._closed:
            return
        self._generation += 1
        generation = self._generation
        try:
            if self._active_locator == locator:
                await self._player.pause()
                self._set_active(None)
                return

            if self._active_locator is not None:
                await self._player.pause()
                self._set_active(None)

            await self._player.replace(locator)
            await self._player.play()
        except Exception as exc:
            logger.warning("Playback error for %s: %s", locator, exc, exc_info=True)
            if generation == self._generation:
                self._set_active(None)
            raise AudioFlowError(PLAYBACK_FAILED) from exc

        if self._closed:
            # Torn down while loading; nothing may keep sounding.
            logger.debug("Stopping playback of %s started after shutdown", locator)
            await self._player.pause()
            return
        if generation != self._generation:
            # A later toggle owns the player now.
            logger.debug("Dropping stale playback start for %s", locator)
            return
        self._set_active(locator)

    async def shutdown(self) -> None:
        self._closed = True
        self._generation += 1
        if self._active_locator is None:
            return
        try:
            await self._player.pause()
        except Exception as exc:
            logger.warning("Failed to stop playback on shutdown: %s", exc)
        finally:
            self._set_active(None)

    def _set_active(self, locator: Optional[str]) -> None:
        if self._active_locator == locator:
            return
        self._active_locator = locator
        if self._on_active_change:
            self._on_active_change(locator)
