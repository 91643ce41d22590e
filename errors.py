"""Shared error codes, user-facing messages and exceptions."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
PERMISSION_CHECK_FAILED = "PERMISSION_CHECK_FAILED"
RECORDING_ALREADY_ACTIVE = "RECORDING_ALREADY_ACTIVE"
RECORDING_FAILED = "RECORDING_FAILED"
RECORDING_NO_ARTIFACT = "RECORDING_NO_ARTIFACT"
RECORDING_IN_PROGRESS = "RECORDING_IN_PROGRESS"
NO_RECORDING = "NO_RECORDING"
CONVERSION_BUSY = "CONVERSION_BUSY"
CONVERSION_NETWORK_ERROR = "CONVERSION_NETWORK_ERROR"
CONVERSION_SERVER_ERROR = "CONVERSION_SERVER_ERROR"
CONVERSION_MISSING_AUDIO = "CONVERSION_MISSING_AUDIO"
CONVERSION_INVALID_AUDIO = "CONVERSION_INVALID_AUDIO"
SOURCE_UNREADABLE = "SOURCE_UNREADABLE"
PLAYBACK_FAILED = "PLAYBACK_FAILED"

ERROR_MESSAGES = {
    PERMISSION_DENIED: "Microphone access is required for this app to work.",
    PERMISSION_CHECK_FAILED: "Failed to request permission",
    RECORDING_ALREADY_ACTIVE: "Please stop the current recording first.",
    RECORDING_FAILED: "Failed to start recording",
    RECORDING_NO_ARTIFACT: "No audio file was recorded",
    RECORDING_IN_PROGRESS: "Please stop the current recording first.",
    NO_RECORDING: "Please record an audio file first.",
    CONVERSION_BUSY: "A conversion is already in progress.",
    CONVERSION_NETWORK_ERROR: "Failed to process audio",
    CONVERSION_SERVER_ERROR: "Server responded with an error",
    CONVERSION_MISSING_AUDIO: "No audio data received from the server",
    CONVERSION_INVALID_AUDIO: "Received audio could not be saved",
    SOURCE_UNREADABLE: "The recorded audio could not be read",
    PLAYBACK_FAILED: "Failed to play the audio",
}


class AudioFlowError(Exception):
    """User-facing failure of a record, convert or play action.

    ``code`` is one of the constants above; ``message`` is what the user
    sees and falls back to the generic text for the code.
    """

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Unexpected error")
        super().__init__(self.message)


class RecordingStateError(RuntimeError):
    """A recording operation was called in a state that forbids it."""
