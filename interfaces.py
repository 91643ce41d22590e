"""Protocol interfaces used by the conversation components."""

from __future__ import annotations

from typing import Optional, Protocol, TypedDict

from models import AudioArtifact, CaptureConfig


class PermissionResult(TypedDict):
    granted: bool


class CaptureResult(TypedDict):
    locator: Optional[str]


class PermissionProvider(Protocol):
    async def request_recording_permission(self) -> PermissionResult: ...


class CaptureDevice(Protocol):
    async def prepare(self, config: CaptureConfig) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> CaptureResult: ...


class ArtifactCache(Protocol):
    @property
    def cache_root(self) -> str: ...

    async def write(self, name: str, base64_payload: str) -> str: ...


class Player(Protocol):
    async def replace(self, locator: str) -> None: ...

    async def play(self) -> None: ...

    async def pause(self) -> None: ...


class ConversionService(Protocol):
    async def convert(self, artifact: AudioArtifact) -> AudioArtifact: ...

    async def aclose(self) -> None: ...

