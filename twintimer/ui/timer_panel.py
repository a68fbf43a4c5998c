"""Stopwatch and countdown cards for the main window.

Each card shows the formatted time, a display-format picker, a
start/pause/resume button, a stop button and a button that detaches
the timer into the mini window.  The countdown card adds the target
inputs.
"""

from __future__ import annotations

from datetime import timedelta

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QLineEdit, QComboBox, QFrame,
)
from PyQt6.QtGui import QIntValidator

from ..controller import TimerController
from ..errors import ValidationError
from ..history.models import TimerKind
from ..timer.engine import TimerState
from ..timer.formatting import DisplayFormat, split_duration
from .styles import display_style


FORMAT_CHOICES = [f.value for f in DisplayFormat]

TOGGLE_LABELS: dict[TimerState, str] = {
    TimerState.IDLE:    "Start",
    TimerState.RUNNING: "Pause",
    TimerState.PAUSED:  "Resume",
}


class TimerPanel(QWidget):
    """Card for one timer kind, driven entirely through the controller."""

    mini_requested = pyqtSignal(object)  # TimerKind

    def __init__(
        self,
        controller: TimerController,
        kind: TimerKind,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._kind = kind
        self._build_ui()
        self._connect_signals()
        self._on_state_changed(kind, controller.engine(kind).state)
        self._on_display_changed(
            kind, controller.display_text(kind), controller.is_warning(kind),
        )

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(16, 12, 16, 14)
        layout.setSpacing(8)

        # ── header: title + display format ───────────────────────────
        header = QHBoxLayout()
        title = QLabel(self._kind.label, card)
        title.setObjectName("sectionTitle")
        header.addWidget(title)
        header.addStretch(1)

        self._format_combo = QComboBox(card)
        self._format_combo.addItems(FORMAT_CHOICES)
        self._format_combo.setCurrentText(
            self._controller.display_format(self._kind).value
        )
        self._format_combo.setToolTip("Display format")
        header.addWidget(self._format_combo)
        layout.addLayout(header)

        # ── time readout ─────────────────────────────────────────────
        self._display = QLabel("00:00:00", card)
        self._display.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._display)

        self._build_extra(card, layout)

        # ── controls ─────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(8)

        self._toggle_btn = QPushButton("Start", card)
        self._toggle_btn.setObjectName("primaryButton")

        self._stop_btn = QPushButton("Stop", card)
        self._stop_btn.setObjectName("dangerButton")

        self._mini_btn = QPushButton("Mini", card)
        self._mini_btn.setToolTip("Detach into a small always-on-top window")

        btn_row.addWidget(self._toggle_btn)
        btn_row.addWidget(self._stop_btn)
        btn_row.addStretch(1)
        btn_row.addWidget(self._mini_btn)
        layout.addLayout(btn_row)

    def _build_extra(self, card: QFrame, layout: QVBoxLayout) -> None:
        """Hook for subclasses to add rows between readout and controls."""

    # ── signals ───────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._toggle_btn.clicked.connect(
            lambda: self._controller.toggle(self._kind)
        )
        self._stop_btn.clicked.connect(
            lambda: self._controller.stop(self._kind)
        )
        self._mini_btn.clicked.connect(
            lambda: self.mini_requested.emit(self._kind)
        )
        self._format_combo.currentTextChanged.connect(
            lambda text: self._controller.set_display_format(self._kind, text)
        )
        self._controller.display_changed.connect(self._on_display_changed)
        self._controller.state_changed.connect(self._on_state_changed)

    # ── slots ─────────────────────────────────────────────────────────

    def _on_display_changed(self, kind: TimerKind, text: str, warning: bool) -> None:
        if kind is not self._kind:
            return
        self._display.setText(text)
        self._display.setStyleSheet(display_style(warning))

    def _on_state_changed(self, kind: TimerKind, state: TimerState) -> None:
        if kind is not self._kind:
            return
        self._toggle_btn.setText(TOGGLE_LABELS[state])
        self._stop_btn.setEnabled(state != TimerState.IDLE)

    # ── test / window helpers ─────────────────────────────────────────

    @property
    def kind(self) -> TimerKind:
        return self._kind

    @property
    def display_text(self) -> str:
        return self._display.text()

    @property
    def toggle_text(self) -> str:
        return self._toggle_btn.text()


class StopwatchPanel(TimerPanel):
    def __init__(
        self, controller: TimerController, parent: QWidget | None = None,
    ) -> None:
        super().__init__(controller, TimerKind.STOPWATCH, parent)


class CountdownPanel(TimerPanel):
    """Countdown card with the target inputs.

    Signals
    -------
    target_set(target: timedelta)
    target_rejected(message: str)
    """

    target_set = pyqtSignal(object)
    target_rejected = pyqtSignal(str)

    def __init__(
        self, controller: TimerController, parent: QWidget | None = None,
    ) -> None:
        super().__init__(controller, TimerKind.COUNTDOWN, parent)
        self._apply_input_mode(self._mode_combo.currentText())

    def _build_extra(self, card: QFrame, layout: QVBoxLayout) -> None:
        row = QHBoxLayout()
        row.setSpacing(4)

        self._mode_combo = QComboBox(card)
        self._mode_combo.addItems(FORMAT_CHOICES)
        self._mode_combo.setCurrentText(
            DisplayFormat.parse(
                self._controller.settings.countdown_input_mode
            ).value
        )
        self._mode_combo.setToolTip("Input mode")
        row.addWidget(self._mode_combo)
        row.addSpacing(8)

        h, m, s = split_duration(self._controller.countdown.original_target)
        validator = QIntValidator(0, 60, card)
        self._hours_input = self._make_input(card, h, validator)
        self._minutes_input = self._make_input(card, m, validator)
        self._seconds_input = self._make_input(card, s, validator)
        self._hours_colon = QLabel(":", card)
        self._minutes_colon = QLabel(":", card)

        row.addWidget(self._hours_input)
        row.addWidget(self._hours_colon)
        row.addWidget(self._minutes_input)
        row.addWidget(self._minutes_colon)
        row.addWidget(self._seconds_input)
        row.addStretch(1)

        self._set_btn = QPushButton("Set", card)
        row.addWidget(self._set_btn)
        layout.addLayout(row)

    @staticmethod
    def _make_input(card: QFrame, value: int, validator: QIntValidator) -> QLineEdit:
        field = QLineEdit(f"{value:02d}", card)
        field.setFixedWidth(44)
        field.setAlignment(Qt.AlignmentFlag.AlignCenter)
        field.setValidator(validator)
        return field

    def _connect_signals(self) -> None:
        super()._connect_signals()
        self._set_btn.clicked.connect(self.apply_target)
        self._mode_combo.currentTextChanged.connect(self._apply_input_mode)
        for field in (self._hours_input, self._minutes_input, self._seconds_input):
            field.returnPressed.connect(self.apply_target)

    def _apply_input_mode(self, mode: str) -> None:
        fmt = DisplayFormat.parse(mode)
        self._controller.settings.countdown_input_mode = fmt.value
        show_hours = fmt is DisplayFormat.HMS
        show_minutes = fmt in (DisplayFormat.HMS, DisplayFormat.MS)
        self._hours_input.setVisible(show_hours)
        self._hours_colon.setVisible(show_hours)
        self._minutes_input.setVisible(show_minutes)
        self._minutes_colon.setVisible(show_minutes)

    def set_inputs(self, hours: str, minutes: str, seconds: str) -> None:
        self._hours_input.setText(hours)
        self._minutes_input.setText(minutes)
        self._seconds_input.setText(seconds)

    def apply_target(self) -> timedelta | None:
        """Validate the inputs and hand the new target to the controller."""
        try:
            target = self._controller.set_countdown_from_input(
                self._hours_input.text(),
                self._minutes_input.text(),
                self._seconds_input.text(),
                self._mode_combo.currentText(),
            )
        except ValidationError as exc:
            self.target_rejected.emit(str(exc))
            return None
        self.target_set.emit(target)
        return target
