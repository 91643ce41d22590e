from __future__ import annotations

import logging
import wave
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from player import SoundDevicePlayer, read_wav


def _write_wav(path: Path, n_frames: int = 160, channels: int = 1, width: int = 2) -> Path:
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(width)
        wf.setframerate(16000)
        wf.writeframes(b"\x00" * width * channels * n_frames)
    return path


def test_read_wav_shapes_frames_by_channel(tmp_path: Path) -> None:
    data, rate = read_wav(str(_write_wav(tmp_path / "a.wav", n_frames=100, channels=2)))

    assert rate == 16000
    assert data.shape == (100, 2)


def test_read_wav_rejects_unsupported_width(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        read_wav(str(_write_wav(tmp_path / "a.wav", width=1)))


@pytest.mark.asyncio
@patch("player.sd")
async def test_replace_then_play(mock_sd: MagicMock, tmp_path: Path) -> None:
    player = SoundDevicePlayer()
    path = _write_wav(tmp_path / "a.wav")

    await player.replace(str(path))
    await player.play()

    assert player.locator == str(path)
    args = mock_sd.play.call_args.args
    assert args[0].shape == (160, 1)
    assert args[1] == 16000


@pytest.mark.asyncio
@patch("player.sd")
async def test_pause_stops_output(mock_sd: MagicMock) -> None:
    player = SoundDevicePlayer()
    await player.pause()
    mock_sd.stop.assert_called_once()


@pytest.mark.asyncio
@patch("player.sd")
async def test_play_without_source_fails(mock_sd: MagicMock) -> None:
    player = SoundDevicePlayer()
    with pytest.raises(RuntimeError, match="no audio loaded"):
        await player.play()
    mock_sd.play.assert_not_called()


@pytest.mark.asyncio
async def test_replace_missing_file_fails(tmp_path: Path) -> None:
    player = SoundDevicePlayer()
    with pytest.raises(FileNotFoundError):
        await player.replace(str(tmp_path / "missing.wav"))
    assert player.locator is None


@pytest.mark.asyncio
async def test_replace_corrupt_file_fails(tmp_path: Path) -> None:
    path = tmp_path / "corrupt.wav"
    path.write_bytes(b"not a wav file")
    player = SoundDevicePlayer()
    with pytest.raises(wave.Error):
        await player.replace(str(path))


@pytest.mark.asyncio
async def test_replace_logs_loaded_file(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write_wav(tmp_path / "logged.wav")

    with caplog.at_level(logging.DEBUG, logger="player"):
        await SoundDevicePlayer().replace(str(path))

    assert any("logged.wav" in r.getMessage() for r in caplog.records)
