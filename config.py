"""Simple JSON-based config store."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

DEFAULT_ENDPOINT = "http://localhost:3000/api/v1/sts"
ENDPOINT_ENV = "STS_URL"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "voice_relay" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_endpoint(self) -> str:
        data = self._read_all()
        value = str(data.get("endpoint", ""))
        return value or os.getenv(ENDPOINT_ENV, "") or DEFAULT_ENDPOINT

    def set_endpoint(self, endpoint: str) -> None:
        data = self._read_all()
        data["endpoint"] = endpoint
        self._write_all(data)

    def get_cache_dir(self) -> str:
        data = self._read_all()
        default = str(Path(tempfile.gettempdir()) / "voice_relay")
        return str(data.get("cache_dir", "")) or default

    def set_cache_dir(self, cache_dir: str) -> None:
        data = self._read_all()
        data["cache_dir"] = cache_dir
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
