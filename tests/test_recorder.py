"""Tests for SoundDeviceRecorder."""

from __future__ import annotations

import wave
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cache import LocalArtifactCache
from models import CaptureConfig
from recorder import SoundDeviceRecorder


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

class _FakeNp:
    """Minimal numpy stand-in so recorder._on_audio doesn't bail."""

    class int16:
        pass

    @staticmethod
    def asarray(data, dtype=None):  # noqa: ANN001, ANN205
        return data


class _FakeAudioInput:
    """Fake audio input similar to what sounddevice callback provides."""

    def __init__(self, n_samples: int = 1600) -> None:
        self._data = b"\x00\x00" * n_samples

    def tobytes(self) -> bytes:
        return self._data


def _recorder(tmp_path: Path) -> SoundDeviceRecorder:
    return SoundDeviceRecorder(LocalArtifactCache(tmp_path))


# ---------------------------------------------------------------
# Basic start / stop
# ---------------------------------------------------------------

@pytest.mark.asyncio
@patch("recorder.sd")
async def test_start_opens_stream_with_capture_config(mock_sd: MagicMock, tmp_path: Path) -> None:
    mock_stream = MagicMock()
    mock_sd.InputStream.return_value = mock_stream

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    await recorder.start()

    kwargs = mock_sd.InputStream.call_args.kwargs
    assert kwargs["samplerate"] == 16000
    assert kwargs["channels"] == 1
    assert kwargs["dtype"] == "int16"
    assert kwargs["blocksize"] == 1600
    mock_stream.start.assert_called_once()

    await recorder.stop()
    mock_stream.stop.assert_called_once()
    mock_stream.close.assert_called_once()


@pytest.mark.asyncio
@patch("recorder.sd")
async def test_start_is_idempotent(mock_sd: MagicMock, tmp_path: Path) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    await recorder.start()
    await recorder.start()

    assert mock_sd.InputStream.call_count == 1
    await recorder.stop()


# ---------------------------------------------------------------
# Finalizing the capture
# ---------------------------------------------------------------

@pytest.mark.asyncio
@patch("recorder.np", _FakeNp())
@patch("recorder.sd")
async def test_stop_writes_wav_file(mock_sd: MagicMock, tmp_path: Path) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    await recorder.start()
    recorder._on_audio(_FakeAudioInput(1600), frames=1600, time_info=None, status=None)
    recorder._on_audio(_FakeAudioInput(800), frames=800, time_info=None, status=None)

    result = await recorder.stop()

    locator = result["locator"]
    assert locator is not None
    assert Path(locator).name.startswith("recording-")
    with wave.open(locator, "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getframerate() == 16000
        assert wf.getsampwidth() == 2
        assert wf.getnframes() == 2400


@pytest.mark.asyncio
@patch("recorder.sd")
async def test_stop_without_audio_returns_no_locator(mock_sd: MagicMock, tmp_path: Path) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    await recorder.start()

    result = await recorder.stop()

    assert result == {"locator": None}
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
@patch("recorder.np", _FakeNp())
@patch("recorder.sd")
async def test_prepare_discards_previous_audio(mock_sd: MagicMock, tmp_path: Path) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    await recorder.start()
    recorder._on_audio(_FakeAudioInput(), frames=1600, time_info=None, status=None)
    await recorder.stop()

    await recorder.prepare(CaptureConfig())
    await recorder.start()
    result = await recorder.stop()

    assert result["locator"] is None


@pytest.mark.asyncio
@patch("recorder.sd")
async def test_failed_stream_start_closes_stream(mock_sd: MagicMock, tmp_path: Path) -> None:
    failing = MagicMock()
    failing.start.side_effect = RuntimeError("device busy")
    working = MagicMock()
    mock_sd.InputStream.side_effect = [failing, working]

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    with pytest.raises(RuntimeError, match="device busy"):
        await recorder.start()

    failing.close.assert_called_once()
    assert recorder._stream is None

    await recorder.start()
    working.start.assert_called_once()


# ---------------------------------------------------------------
# No sounddevice installed
# ---------------------------------------------------------------

@pytest.mark.asyncio
async def test_start_raises_without_sounddevice(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    import recorder as rec_mod
    monkeypatch.setattr(rec_mod, "sd", None)

    recorder = _recorder(tmp_path)
    with pytest.raises(RuntimeError, match="sounddevice is not installed"):
        await recorder.start()


# ---------------------------------------------------------------
# Callback after stop is a no-op
# ---------------------------------------------------------------

@pytest.mark.asyncio
@patch("recorder.np", _FakeNp())
@patch("recorder.sd")
async def test_callback_after_stop_is_noop(mock_sd: MagicMock, tmp_path: Path) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = _recorder(tmp_path)
    await recorder.prepare(CaptureConfig())
    await recorder.start()
    await recorder.stop()

    recorder._on_audio(_FakeAudioInput(), frames=1600, time_info=None, status=None)

    assert recorder._chunks == []
