"""Main application window for TwinTimer."""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QMessageBox, QInputDialog,
    QApplication,
)

from .audio.sounds import SoundManager
from .controller import TimerController, EXIT_REASON, MINI_EXIT_REASON
from .errors import RecordNotFoundError
from .history.models import TimerKind
from .history.store import HistoryStore
from .settings import (
    Settings, load_settings, save_settings, SETTINGS_PATH, HISTORY_PATH,
)
from .timer.engine import SessionSummary, TimerState
from .timer.formatting import format_duration
from .ui.history_panel import HistoryPanel
from .ui.mini_window import MiniTimerWindow
from .ui.styles import build_stylesheet
from .ui.timer_panel import StopwatchPanel, CountdownPanel

logger = logging.getLogger(__name__)


class TwinTimerApp(QMainWindow):
    """Main window: stopwatch, countdown and the history list."""

    def __init__(
        self,
        *,
        settings_path: Path = SETTINGS_PATH,
        history_path: Path = HISTORY_PATH,
        sound_manager: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("TwinTimer")
        self.setMinimumSize(420, 640)

        # ── settings ──────────────────────────────────────────────────
        self._settings_path = settings_path
        self._settings: Settings = load_settings(settings_path)
        self.resize(self._settings.window_width, self._settings.window_height)
        if self._settings.window_x is not None and self._settings.window_y is not None:
            self.move(self._settings.window_x, self._settings.window_y)

        # ── history + controller ─────────────────────────────────────
        self._history = HistoryStore(history_path, parent=self)
        self._history.load_failed.connect(self._on_load_failed)
        self._history.save_failed.connect(self._on_save_failed)
        self._controller = TimerController(self._history, self._settings, parent=self)

        # ── sound ─────────────────────────────────────────────────────
        self._sound_manager = sound_manager
        if self._sound_manager is None and self._settings.sound_enabled:
            self._sound_manager = SoundManager(
                parent=self, volume=self._settings.sound_volume,
            )
        elif self._sound_manager is not None:
            self._sound_manager.set_volume(self._settings.sound_volume)
            self._sound_manager.set_enabled(self._settings.sound_enabled)

        self._mini_window: MiniTimerWindow | None = None
        self._exit_confirmed = False
        self._shut_down = False

        self.setStyleSheet(build_stylesheet())
        self._build_ui()
        self._connect_signals()

        self._history.load()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(10)

        self._stopwatch_panel = StopwatchPanel(self._controller, central)
        self._countdown_panel = CountdownPanel(self._controller, central)
        self._history_panel = HistoryPanel(self._history, central)

        layout.addWidget(self._stopwatch_panel)
        layout.addWidget(self._countdown_panel)
        layout.addWidget(self._history_panel, 1)

    def _connect_signals(self) -> None:
        for panel in (self._stopwatch_panel, self._countdown_panel):
            panel.mini_requested.connect(self.show_mini)
        self._countdown_panel.target_set.connect(self._on_target_set)
        self._countdown_panel.target_rejected.connect(self._on_target_rejected)

        self._history_panel.rename_requested.connect(self._on_rename_requested)
        self._history_panel.delete_requested.connect(self._on_delete_requested)
        self._history_panel.clear_requested.connect(self._on_clear_requested)

        self._controller.state_changed.connect(self._on_state_changed)
        self._controller.countdown_expired.connect(self._on_countdown_expired)
        self._controller.near_expiry.connect(
            lambda: self._play_sound("countdown_warning")
        )

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def controller(self) -> TimerController:
        return self._controller

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def mini_window(self) -> MiniTimerWindow | None:
        return self._mini_window

    def show_mini(self, kind: TimerKind) -> None:
        """Replace the main window with a mini window for *kind*."""
        self._close_mini()

        mini = MiniTimerWindow(
            self._controller,
            kind,
            always_on_top=self._settings.mini_always_on_top,
        )
        mini.setStyleSheet(build_stylesheet())
        mini.return_requested.connect(self.return_from_mini)
        mini.exit_requested.connect(self._exit_from_mini)
        mini.moved.connect(self._remember_mini_position)

        if self._settings.mini_x is not None and self._settings.mini_y is not None:
            mini.move(self._settings.mini_x, self._settings.mini_y)
        else:
            screen = QApplication.primaryScreen()
            if screen is not None:
                area = screen.availableGeometry()
                mini.move(area.right() - mini.width() - 50, area.top() + 50)

        self._mini_window = mini
        mini.show()
        self.hide()

    def return_from_mini(self) -> None:
        self._close_mini()
        self.show()
        self.raise_()
        self.activateWindow()

    # ══════════════════════════════════════════════════════════════════
    #  DIALOGS
    # ══════════════════════════════════════════════════════════════════

    def _confirm(self, title: str, text: str) -> bool:
        reply = QMessageBox.question(
            self,
            title,
            text,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def _inform(self, title: str, text: str) -> None:
        QMessageBox.information(self, title, text)

    def _warn(self, title: str, text: str) -> None:
        QMessageBox.warning(self, title, text)

    def _error(self, title: str, text: str) -> None:
        QMessageBox.critical(self, title, text)

    # ══════════════════════════════════════════════════════════════════
    #  SLOTS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, kind: TimerKind, state: TimerState) -> None:
        if state == TimerState.RUNNING:
            self._play_sound("timer_start")

    def _on_countdown_expired(self, summary: SessionSummary) -> None:
        self._play_sound("countdown_alarm")
        target = format_duration(summary.original_target, "hh:mm:ss")
        self._inform("Time's up", f"The {target} countdown has finished!")

    def _on_target_set(self, target: timedelta) -> None:
        self._inform(
            "Countdown set",
            f"Countdown set to {format_duration(target, 'hh:mm:ss')}",
        )

    def _on_target_rejected(self, message: str) -> None:
        self._warn("Invalid input", message)

    def _on_rename_requested(self, record_id: str) -> None:
        try:
            record = self._history.get(record_id)
        except RecordNotFoundError as exc:
            self._error("Rename failed", str(exc))
            return
        name, ok = QInputDialog.getText(
            self,
            "Name this record",
            f"Name for this {record.kind.label.lower()} record:",
            text=record.name,
        )
        if not ok:
            return
        try:
            self._history.rename(record_id, name)
        except RecordNotFoundError as exc:
            self._error("Rename failed", str(exc))

    def _on_delete_requested(self, record_id: str) -> None:
        try:
            record = self._history.get(record_id)
        except RecordNotFoundError as exc:
            self._error("Delete failed", str(exc))
            return
        details = (
            f"{record.kind.label}: {record.name}\n"
            f"Started: {record.start_time:%Y-%m-%d %H:%M:%S}\n"
            f"Duration: {format_duration(record.duration, 'hh:mm:ss')}"
        )
        if not self._confirm("Delete record?", f"Delete this record?\n\n{details}"):
            return
        try:
            self._history.remove(record_id)
        except RecordNotFoundError as exc:
            self._error("Delete failed", str(exc))

    def _on_clear_requested(self) -> None:
        if self._confirm("Clear history?", "Delete every history record?"):
            self._history.clear()

    def _on_load_failed(self, message: str) -> None:
        self._warn(
            "History unavailable",
            f"Could not load the saved history, starting fresh.\n\n{message}",
        )

    def _on_save_failed(self, message: str) -> None:
        self._error("Save failed", f"Could not save the history.\n\n{message}")

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _play_sound(self, name: str) -> None:
        if self._sound_manager is not None:
            self._sound_manager.play(name)

    def _close_mini(self) -> None:
        if self._mini_window is None:
            return
        self._mini_window.detach()
        self._mini_window.close()
        self._mini_window.deleteLater()
        self._mini_window = None

    def _remember_mini_position(self, x: int, y: int) -> None:
        self._settings.mini_x = x
        self._settings.mini_y = y

    def _exit_from_mini(self) -> None:
        if self._controller.has_active_timers():
            text = (
                "A timer is still active. Exiting will save the current "
                "session to history.\nExit anyway?"
            )
        else:
            text = "Exit TwinTimer?"
        if not self._confirm("Exit", text):
            return
        self._exit_confirmed = True
        self.shutdown(MINI_EXIT_REASON)
        self.close()
        QApplication.quit()

    def shutdown(self, reason: str = EXIT_REASON) -> None:
        """Record active sessions, save everything, close the mini window."""
        if self._shut_down:
            return
        self._shut_down = True
        self._controller.shutdown(reason)
        self._save_geometry()
        save_settings(self._settings, self._settings_path)
        self._close_mini()
        self._history.close()

    def _save_geometry(self) -> None:
        geo = self.geometry()
        self._settings.window_x = geo.x()
        self._settings.window_y = geo.y()
        self._settings.window_width = geo.width()
        self._settings.window_height = geo.height()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Confirm when a timer is active, then flush it to history."""
        if (
            not self._exit_confirmed
            and self._controller.has_active_timers()
            and not self._confirm(
                "Quit TwinTimer?",
                "A timer is still active. Quit anyway?\n"
                "The current session will be saved to history.",
            )
        ):
            event.ignore()
            return
        self.shutdown(EXIT_REASON)
        event.accept()
