"""History list: the most recent sessions, newest first.

Clicking a row emits ``rename_requested(record_id)``; the small ×
button emits ``delete_requested(record_id)``.  The window that owns the
panel runs the dialogs and talks to the store.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QFrame,
    QPushButton, QScrollArea, QSizePolicy,
)

from ..history.models import TimerKind, TimerRecord
from ..history.store import HistoryStore, DISPLAY_LIMIT
from ..timer.formatting import format_duration
from .styles import PALETTE


class HistoryPanel(QWidget):
    """Scrollable list of recent timer records."""

    rename_requested = pyqtSignal(str)
    delete_requested = pyqtSignal(str)
    clear_requested = pyqtSignal()

    def __init__(
        self,
        store: HistoryStore,
        parent: QWidget | None = None,
        *,
        limit: int = DISPLAY_LIMIT,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._limit = limit
        self._row_widgets: list[QWidget] = []
        self._build_ui()
        self._store.changed.connect(self.refresh)
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(6)

        header = QHBoxLayout()
        title = QLabel("History")
        title.setObjectName("sectionTitle")
        header.addWidget(title)
        header.addStretch(1)
        self._clear_btn = QPushButton("Clear all")
        self._clear_btn.setObjectName("dangerButton")
        self._clear_btn.clicked.connect(self.clear_requested.emit)
        header.addWidget(self._clear_btn)
        layout.addLayout(header)

        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        inner = QWidget(scroll)
        self._rows_container = QVBoxLayout(inner)
        self._rows_container.setContentsMargins(0, 0, 4, 0)
        self._rows_container.setSpacing(8)
        self._rows_container.addStretch(1)
        scroll.setWidget(inner)
        layout.addWidget(scroll, 1)

        self._empty_label = QLabel("No sessions yet")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet(f"color: {PALETTE['text_muted']};")
        layout.addWidget(self._empty_label)

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Rebuild the rows from the store."""
        for w in self._row_widgets:
            w.setParent(None)
            w.deleteLater()
        self._row_widgets.clear()

        records = self._store.recent(self._limit)
        self._empty_label.setVisible(not records)
        self._clear_btn.setEnabled(bool(records))

        for index, record in enumerate(records):
            row = self._make_row(record)
            # keep the trailing stretch last
            self._rows_container.insertWidget(index, row)
            self._row_widgets.append(row)

    @property
    def row_count(self) -> int:
        return len(self._row_widgets)

    # ── row builder ───────────────────────────────────────────────────

    def _make_row(self, record: TimerRecord) -> QWidget:
        frame = QFrame(self)
        frame.setObjectName("card")
        frame.setCursor(Qt.CursorShape.PointingHandCursor)
        frame.setToolTip("Click to add or edit a name for this record")
        frame.mousePressEvent = (
            lambda e, rid=record.id: self.rename_requested.emit(rid)
        )

        row = QHBoxLayout(frame)
        row.setContentsMargins(10, 8, 6, 8)
        row.setSpacing(6)

        content = QVBoxLayout()
        content.setSpacing(2)

        if record.name:
            name_lbl = QLabel(record.name, frame)
            name_lbl.setStyleSheet(
                f"font-weight: 700; color: {PALETTE['name']}; background: transparent;"
            )
            content.addWidget(name_lbl)

        kind_lbl = QLabel(record.kind.label, frame)
        kind_lbl.setStyleSheet("font-weight: 700; font-size: 12px; background: transparent;")
        content.addWidget(kind_lbl)

        details = QGridLayout()
        details.setHorizontalSpacing(16)
        details.setVerticalSpacing(1)
        details.addWidget(self._detail(frame, f"Start: {record.start_time:%H:%M:%S}"), 0, 0)
        details.addWidget(self._detail(frame, f"End: {record.end_time:%H:%M:%S}"), 1, 0)
        duration = format_duration(record.duration, "hh:mm:ss")
        if record.kind is TimerKind.COUNTDOWN:
            target = format_duration(record.original_target, "hh:mm:ss")
            details.addWidget(self._detail(frame, f"Target: {target}", True), 0, 1)
            details.addWidget(self._detail(frame, f"Duration: {duration}", True), 1, 1)
        else:
            details.addWidget(self._detail(frame, f"Duration: {duration}", True), 2, 0)
        content.addLayout(details)
        row.addLayout(content, 1)

        delete_btn = QPushButton("✕", frame)
        delete_btn.setObjectName("deleteButton")
        delete_btn.setFixedSize(18, 18)
        delete_btn.setToolTip("Delete this record")
        delete_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        delete_btn.clicked.connect(
            lambda _checked=False, rid=record.id: self.delete_requested.emit(rid)
        )
        row.addWidget(delete_btn, 0, Qt.AlignmentFlag.AlignTop)

        frame.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        return frame

    @staticmethod
    def _detail(parent: QWidget, text: str, emphasised: bool = False) -> QLabel:
        lbl = QLabel(text, parent)
        color = PALETTE["detail"] if emphasised else PALETTE["text_muted"]
        weight = "font-weight: 600;" if emphasised else ""
        lbl.setStyleSheet(f"font-size: 10px; color: {color}; {weight} background: transparent;")
        return lbl
