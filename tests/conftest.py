from __future__ import annotations

import asyncio
from typing import Optional

import pytest

from interfaces import CaptureResult, PermissionResult
from models import AudioArtifact, CaptureConfig
from recording_session import RecordingSession


@pytest.fixture(autouse=True)
def release_microphone():
    RecordingSession._microphone_owner = None
    yield
    RecordingSession._microphone_owner = None


class FakePermissionProvider:
    def __init__(self, granted: bool = True, error: Optional[Exception] = None) -> None:
        self.granted = granted
        self.error = error
        self.calls = 0

    async def request_recording_permission(self) -> PermissionResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return {"granted": self.granted}


class FakeCaptureDevice:
    def __init__(self, locators: Optional[list[Optional[str]]] = None) -> None:
        self.locators = list(locators) if locators is not None else ["/tmp/recording-1.wav"]
        self.config: Optional[CaptureConfig] = None
        self.started = 0
        self.stopped = 0
        self.start_error: Optional[Exception] = None
        self.stop_error: Optional[Exception] = None

    async def prepare(self, config: CaptureConfig) -> None:
        self.config = config

    async def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started += 1

    async def stop(self) -> CaptureResult:
        self.stopped += 1
        if self.stop_error is not None:
            raise self.stop_error
        locator = self.locators.pop(0) if self.locators else None
        return {"locator": locator}


class FakePlayer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Optional[str]]] = []
        self.fail_on: set[str] = set()

    async def replace(self, locator: str) -> None:
        self.calls.append(("replace", locator))
        if locator in self.fail_on:
            raise RuntimeError(f"cannot load {locator}")

    async def play(self) -> None:
        self.calls.append(("play", None))

    async def pause(self) -> None:
        self.calls.append(("pause", None))


class FakeConverter:
    def __init__(self) -> None:
        self.inputs: list[AudioArtifact] = []
        self.error: Optional[Exception] = None
        self.release: Optional[asyncio.Event] = None
        self.closed = False
        self._count = 0

    async def convert(self, artifact: AudioArtifact) -> AudioArtifact:
        self.inputs.append(artifact)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        self._count += 1
        return AudioArtifact(locator=f"/cache/processed-{self._count}.wav", size_hint=4)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def permission_provider() -> FakePermissionProvider:
    return FakePermissionProvider()


@pytest.fixture
def capture_device() -> FakeCaptureDevice:
    return FakeCaptureDevice()


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()
