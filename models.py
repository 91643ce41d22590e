"""Core data models for the app."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class PermissionState(str, Enum):
    UNKNOWN = "UNKNOWN"
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class RecordingStatus(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"


class Direction(str, Enum):
    SENT = "sent"
    RECEIVED = "received"


@dataclass(frozen=True)
class CaptureConfig:
    channels: int = 1
    sample_rate: int = 16000
    container: str = "wav"
    bit_rate: int = 128000
    sample_width: int = 2


@dataclass(frozen=True)
class AudioArtifact:
    locator: str
    size_hint: Optional[int] = None


@dataclass(frozen=True)
class MessageEntry:
    id: str
    artifact: AudioArtifact
    direction: Direction
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def now_ms() -> int:
    return int(time.time() * 1000)


def new_entry(artifact: AudioArtifact, direction: Direction) -> MessageEntry:
    """Wrap an artifact in a history entry with a fresh, unique id."""
    entry_id = f"{now_ms()}-{secrets.token_hex(4)}"
    return MessageEntry(id=entry_id, artifact=artifact, direction=direction)
