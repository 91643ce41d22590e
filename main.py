"""Application entrypoint."""

from __future__ import annotations

import concurrent.futures
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from async_runner import AsyncRunner
from cache import LocalArtifactCache
from config import JsonConfigStore
from conversion_client import HttpConversionClient
from models import Direction, MessageEntry, PermissionState, RecordingStatus
from permissions import SoundDevicePermissionProvider
from player import SoundDevicePlayer
from recorder import SoundDeviceRecorder
from session_controller import ConversationController

try:
    from PySide6.QtCore import QObject, Signal
    from PySide6.QtWidgets import (
        QApplication,
        QHBoxLayout,
        QInputDialog,
        QLabel,
        QListWidget,
        QListWidgetItem,
        QMainWindow,
        QMessageBox,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

ERROR_TITLES = {
    "PERMISSION": "Permission Denied",
    "RECORDING": "Recording Failed",
    "NO": "No Audio",
    "CONVERSION": "Processing Error",
    "SOURCE": "Processing Error",
    "PLAYBACK": "Playback Error",
}


def error_title(code: str) -> str:
    return ERROR_TITLES.get(code.split("_", 1)[0], "Error")


class UIBridge(QObject):
    state_signal = Signal(str, str)  # from_state, to_state
    permission_signal = Signal(str)
    busy_signal = Signal(bool)
    history_signal = Signal(object)
    playback_signal = Signal(object)
    error_signal = Signal(str, str)  # code, message


class MessageRow(QWidget):
    def __init__(self, entry: MessageEntry, on_toggle) -> None:  # noqa: ANN001
        super().__init__()
        self.locator = entry.artifact.locator
        self._button = QPushButton("Play")
        self._button.clicked.connect(lambda: on_toggle(self.locator))
        who = "You" if entry.direction == Direction.SENT else "Reply"
        stamp = entry.created_at.astimezone().strftime("%H:%M")
        layout = QHBoxLayout()
        layout.setContentsMargins(6, 2, 6, 2)
        layout.addWidget(self._button)
        layout.addWidget(QLabel(f"{who} · {stamp}"))
        layout.addStretch(1)
        self.setLayout(layout)

    def set_playing(self, playing: bool) -> None:
        self._button.setText("Pause" if playing else "Play")


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store = JsonConfigStore()
        self.runner = AsyncRunner()
        self.ui = UIBridge()
        self.ui.state_signal.connect(self._on_state_change_ui)
        self.ui.permission_signal.connect(self._on_permission_ui)
        self.ui.busy_signal.connect(self._on_busy_ui)
        self.ui.history_signal.connect(self._on_history_ui)
        self.ui.playback_signal.connect(self._on_playback_ui)
        self.ui.error_signal.connect(self._on_error_ui)

        cache = LocalArtifactCache(Path(self.config_store.get_cache_dir()))
        self.controller = ConversationController(
            permission_provider=SoundDevicePermissionProvider(),
            capture_device=SoundDeviceRecorder(cache),
            converter=HttpConversionClient(self.config_store.get_endpoint(), cache),
            player=SoundDevicePlayer(),
            on_state_change=self._on_state_change,
            on_permission_change=lambda s: self.ui.permission_signal.emit(s.value),
            on_busy_change=self.ui.busy_signal.emit,
            on_history_change=self.ui.history_signal.emit,
            on_playback_change=self.ui.playback_signal.emit,
            on_error=self.ui.error_signal.emit,
        )
        self._rows: list[MessageRow] = []
        self._build_window()
        self.app.aboutToQuit.connect(self.quit)

    def _build_window(self) -> None:
        self.window = QMainWindow()
        self.window.setWindowTitle("Speech to Speech")
        settings = self.window.menuBar().addMenu("Settings")
        settings.addAction("Set Endpoint", self._set_endpoint)

        self.notice = QLabel("Record, convert, and play audio")
        self.messages = QListWidget()
        self.record_button = QPushButton("Start Recording")
        self.record_button.setEnabled(False)
        self.record_button.clicked.connect(self._on_record_clicked)
        self.send_button = QPushButton("Send")
        self.send_button.clicked.connect(self._on_send_clicked)

        buttons = QHBoxLayout()
        buttons.addWidget(self.record_button)
        buttons.addWidget(self.send_button)
        layout = QVBoxLayout()
        layout.addWidget(self.notice)
        layout.addWidget(self.messages, 1)
        layout.addLayout(buttons)
        central = QWidget()
        central.setLayout(layout)
        self.window.setCentralWidget(central)
        self.window.resize(420, 640)
        self._refresh_buttons()

    def _set_endpoint(self) -> None:
        value, ok = QInputDialog.getText(
            self.window, "Endpoint", "Conversion URL", text=self.config_store.get_endpoint()
        )
        if not ok or not value:
            return
        self.config_store.set_endpoint(value)
        QMessageBox.information(self.window, "Saved", "Endpoint saved. Restart app to apply.")

    # ------------------------------------------------------------------
    # Callbacks (called on the asyncio thread → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: RecordingStatus, to_state: RecordingStatus) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_record_clicked(self) -> None:
        self.record_button.setEnabled(False)
        self.runner.submit(self.controller.toggle_recording())

    def _on_send_clicked(self) -> None:
        self.send_button.setEnabled(False)
        self.runner.submit(self.controller.submit())

    def _on_toggle_playback(self, locator: str) -> None:
        self.runner.submit(self.controller.toggle_playback(locator))

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        recording = to_state == RecordingStatus.RECORDING.value
        self.record_button.setText("Stop Recording" if recording else "Start Recording")
        self._refresh_buttons()

    def _on_permission_ui(self, state: str) -> None:
        if state != PermissionState.GRANTED.value:
            self.notice.setText("Microphone permission is required for this app to work.")
        self._refresh_buttons()

    def _on_busy_ui(self, busy: bool) -> None:
        self.send_button.setText("Sending..." if busy else "Send")
        self._refresh_buttons()

    def _on_history_ui(self, entries: Sequence[MessageEntry]) -> None:
        self.messages.clear()
        self._rows = []
        active = self.controller.playback.active_locator
        for entry in reversed(entries):
            row = MessageRow(entry, self._on_toggle_playback)
            row.set_playing(entry.artifact.locator == active)
            item = QListWidgetItem(self.messages)
            item.setSizeHint(row.sizeHint())
            self.messages.setItemWidget(item, row)
            self._rows.append(row)
        self._refresh_buttons()

    def _on_playback_ui(self, locator: Optional[str]) -> None:
        for row in self._rows:
            row.set_playing(row.locator == locator)

    def _on_error_ui(self, code: str, message: str) -> None:
        QMessageBox.warning(self.window, error_title(code), message)
        self._refresh_buttons()

    def _refresh_buttons(self) -> None:
        self.record_button.setEnabled(self.controller.can_record)
        self.send_button.setEnabled(self.controller.can_submit)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.runner.start()
        self.runner.submit(self.controller.initialize())
        self.window.show()
        return self.app.exec()

    def quit(self) -> None:
        if not self.runner.running:
            return
        try:
            self.runner.submit(self.controller.shutdown()).result(timeout=5.0)
        except (concurrent.futures.TimeoutError, RuntimeError) as exc:
            logger.warning("Shutdown did not complete cleanly: %s", exc)
        self.runner.stop()


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
