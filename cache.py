"""Local file cache for audio artifacts."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class LocalArtifactCache:
    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = root or Path(tempfile.gettempdir()) / "voice_relay"

    @property
    def cache_root(self) -> str:
        return str(self._root)

    def path_for(self, name: str) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root / name

    async def write(self, name: str, base64_payload: str) -> str:
        """Decode ``base64_payload`` into ``name`` and return its path."""
        try:
            data = base64.b64decode(base64_payload, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid base64 audio payload: {exc}") from exc
        path = self.path_for(name)
        await asyncio.to_thread(path.write_bytes, data)
        logger.info("Cached %s (%d bytes)", path, len(data))
        return str(path)
