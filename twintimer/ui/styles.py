"""QSS stylesheet and colours for TwinTimer."""

from __future__ import annotations

# ── palette ──────────────────────────────────────────────────────────────

PALETTE: dict[str, str] = {
    "bg":           "#2B303A",
    "bg_secondary": "#353C48",
    "surface":      "#404856",
    "accent":       "#5FB3F9",
    "accent2":      "#8CC9FF",
    "text":         "#FFFFFF",
    "text_muted":   "#A7AFBE",
    "name":         "#9BE29B",
    "detail":       "#ADD8E6",
    "warning":      "#FF4D4D",
    "danger":       "#F38BA8",
    "border":       "#4A5262",
}

DISPLAY_FONT_SIZE = 44
MINI_FONT_SIZE = 26


def display_style(warning: bool, size: int = DISPLAY_FONT_SIZE) -> str:
    """Stylesheet for a time readout, red while the countdown is nearly done."""
    color = PALETTE["warning"] if warning else PALETTE["text"]
    return (
        f"font-size: {size}px; font-weight: 700; color: {color};"
        f" font-family: 'Menlo', 'Consolas', monospace;"
        f" background: transparent;"
    )


def build_stylesheet(palette: dict[str, str] = PALETTE) -> str:
    p = palette
    return f"""
    /* ── global ─────────────────────────────────── */
    QWidget {{
        background-color: {p['bg']};
        color: {p['text']};
        font-family: "Helvetica Neue", "Segoe UI", Arial;
        font-size: 13px;
    }}

    QMainWindow {{
        background-color: {p['bg']};
    }}

    QFrame#card {{
        background-color: {p['bg_secondary']};
        border-radius: 10px;
    }}

    QLabel#sectionTitle {{
        font-size: 15px;
        font-weight: 700;
        background: transparent;
    }}

    /* ── buttons ─────────────────────────────────── */
    QPushButton {{
        background-color: {p['surface']};
        color: {p['text']};
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 6px 16px;
        font-weight: 600;
    }}

    QPushButton:hover {{
        border-color: {p['accent']};
    }}

    QPushButton:pressed {{
        background-color: {p['accent']};
        color: {p['bg']};
    }}

    QPushButton#primaryButton {{
        background-color: {p['accent']};
        color: {p['bg']};
        border: none;
    }}

    QPushButton#primaryButton:hover {{
        background-color: {p['accent2']};
    }}

    QPushButton#dangerButton {{
        background-color: transparent;
        color: {p['danger']};
    }}

    QPushButton#dangerButton:hover {{
        background-color: {p['danger']};
        color: {p['bg']};
    }}

    QPushButton#deleteButton {{
        background-color: transparent;
        border: none;
        color: {p['text_muted']};
        padding: 0px;
        font-size: 12px;
    }}

    QPushButton#deleteButton:hover {{
        color: {p['danger']};
    }}

    /* ── inputs ──────────────────────────────────── */
    QLineEdit, QComboBox {{
        background-color: {p['bg']};
        color: {p['text']};
        border: 1px solid {p['border']};
        border-radius: 6px;
        padding: 4px 8px;
    }}

    QLineEdit:focus, QComboBox:focus {{
        border-color: {p['accent']};
    }}

    /* ── scroll area ─────────────────────────────── */
    QScrollArea {{
        border: none;
        background: transparent;
    }}

    QScrollBar:vertical {{
        background: transparent;
        width: 8px;
    }}

    QScrollBar::handle:vertical {{
        background: {p['border']};
        border-radius: 4px;
        min-height: 24px;
    }}

    QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {{
        height: 0px;
    }}
    """
