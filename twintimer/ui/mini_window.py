"""Compact always-on-top window for a single timer.

Frameless and draggable from anywhere.  The owner decides what
"return" and "exit" mean; this widget only emits the requests.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QPoint, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)

from ..controller import TimerController
from ..history.models import TimerKind
from ..timer.engine import TimerState
from .styles import display_style, MINI_FONT_SIZE


# Unicode glyphs stand in for the play/pause icons.
_TOGGLE_GLYPHS: dict[TimerState, str] = {
    TimerState.IDLE:    "▶",
    TimerState.RUNNING: "⏸",
    TimerState.PAUSED:  "▶",
}


class MiniTimerWindow(QWidget):
    """Floating mini display with toggle / stop / return / exit."""

    return_requested = pyqtSignal()
    exit_requested = pyqtSignal()
    moved = pyqtSignal(int, int)

    def __init__(
        self,
        controller: TimerController,
        kind: TimerKind,
        *,
        always_on_top: bool = True,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._kind = kind
        self._drag_offset: QPoint | None = None

        flags = Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool
        if always_on_top:
            flags |= Qt.WindowType.WindowStaysOnTopHint
        self.setWindowFlags(flags)
        self.setWindowTitle(kind.label)
        self.setFixedSize(240, 120)

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
        layout.setContentsMargins(10, 6, 10, 8)
        layout.setSpacing(4)

        header = QHBoxLayout()
        title = QLabel(self._kind.label, card)
        title.setStyleSheet("font-size: 11px; background: transparent;")
        header.addWidget(title)
        header.addStretch(1)

        self._return_btn = QPushButton("Return", card)
        self._exit_btn = QPushButton("Exit", card)
        self._exit_btn.setObjectName("dangerButton")
        for btn in (self._return_btn, self._exit_btn):
            btn.setStyleSheet("padding: 2px 8px; font-size: 11px;")
            header.addWidget(btn)
        layout.addLayout(header)

        row = QHBoxLayout()
        self._display = QLabel("00:00:00", card)
        self._display.setAlignment(Qt.AlignmentFlag.AlignCenter)
        row.addWidget(self._display, 1)

        self._toggle_btn = QPushButton(_TOGGLE_GLYPHS[TimerState.IDLE], card)
        self._toggle_btn.setObjectName("primaryButton")
        self._stop_btn = QPushButton("■", card)
        for btn in (self._toggle_btn, self._stop_btn):
            btn.setFixedSize(32, 32)
            btn.setStyleSheet("padding: 0px;")
            row.addWidget(btn)
        layout.addLayout(row)

    def _connect_signals(self) -> None:
        self._toggle_btn.clicked.connect(
            lambda: self._controller.toggle(self._kind)
        )
        self._stop_btn.clicked.connect(
            lambda: self._controller.stop(self._kind)
        )
        self._return_btn.clicked.connect(self.return_requested.emit)
        self._exit_btn.clicked.connect(self.exit_requested.emit)
        self._controller.display_changed.connect(self._on_display_changed)
        self._controller.state_changed.connect(self._on_state_changed)

    # ── slots ─────────────────────────────────────────────────────────

    def _on_display_changed(self, kind: TimerKind, text: str, warning: bool) -> None:
        if kind is not self._kind:
            return
        self._display.setText(text)
        self._display.setStyleSheet(display_style(warning, MINI_FONT_SIZE))

    def _on_state_changed(self, kind: TimerKind, state: TimerState) -> None:
        if kind is not self._kind:
            return
        self._toggle_btn.setText(_TOGGLE_GLYPHS[state])

    def detach(self) -> None:
        """Stop listening to the controller before the window goes away."""
        self._controller.display_changed.disconnect(self._on_display_changed)
        self._controller.state_changed.disconnect(self._on_state_changed)

    @property
    def kind(self) -> TimerKind:
        return self._kind

    @property
    def display_text(self) -> str:
        return self._display.text()

    # ── dragging ──────────────────────────────────────────────────────

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_offset = (
                event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            )
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if (
            self._drag_offset is not None
            and event.buttons() & Qt.MouseButton.LeftButton
        ):
            self.move(event.globalPosition().toPoint() - self._drag_offset)
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if self._drag_offset is not None:
            self._drag_offset = None
            self.moved.emit(self.x(), self.y())
        super().mouseReleaseEvent(event)
