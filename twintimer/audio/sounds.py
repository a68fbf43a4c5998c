"""Alert sounds, synthesised with numpy and played through QSoundEffect.

Sounds are generated once as WAV files and cached in the app data
directory.

Sound names
-----------
- ``timer_start``        short two-note blip when a timer starts
- ``countdown_warning``  soft double-tap when a countdown enters its last 10 s
- ``countdown_alarm``    three bright bell strikes when a countdown expires
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_DATA_DIR

logger = logging.getLogger(__name__)


SOUNDS_DIR = APP_DATA_DIR / "sounds"

SOUND_NAMES = (
    "timer_start",
    "countdown_warning",
    "countdown_alarm",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_start_blip() -> bytes:
    """Timer start: two quick rising notes (E5 → A5)."""
    parts: list[np.ndarray] = []
    for freq in (659.25, 880.0):
        tone = _sine(freq, 0.07) * 0.4
        env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.3, release=200)
        parts.append(tone * env)
        parts.append(_silence(0.02))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_double_tap() -> bytes:
    """Near expiry: gentle double-tap (800 Hz), 80 ms apart."""
    tap = _sine(800.0, 0.04) * 0.35
    env = _make_envelope(len(tap), attack=40, decay=100, sustain_level=0.2, release=200)
    tap = tap * env
    return _to_wav_bytes(np.concatenate([tap, _silence(0.08), tap, _silence(0.05)]))


def _generate_alarm() -> bytes:
    """Expiry: three bell strikes (A5 with an octave overtone)."""
    strike_dur = 0.35
    parts: list[np.ndarray] = []
    for _ in range(3):
        base = _sine(880.0, strike_dur) * 0.5
        overtone = _sine(1760.0, strike_dur) * 0.12
        combined = base + overtone
        env = _make_envelope(
            len(combined),
            attack=int(SAMPLE_RATE * 0.005),
            decay=int(SAMPLE_RATE * 0.08),
            sustain_level=0.35,
            release=int(SAMPLE_RATE * 0.2),
        )
        parts.append(combined * env)
        parts.append(_silence(0.1))
    return _to_wav_bytes(np.concatenate(parts))


_GENERATORS: dict[str, callable] = {
    "timer_start": _generate_start_blip,
    "countdown_warning": _generate_double_tap,
    "countdown_alarm": _generate_alarm,
}


# ═══════════════════════════════════════════════════════════════════════════
#  PLAYBACK
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Plays the TwinTimer alerts by name.

    WAV files are written to *sounds_dir* on first use.  If that
    directory cannot be created or written, the affected sounds are
    simply unavailable and ``play`` stays silent for them.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        volume: int = 70,
        enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._enabled = enabled
        self._volume = 0.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        for name, path in self._cached_files().items():
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            self._effects[name] = effect
        self.set_volume(volume)

    @property
    def available(self) -> tuple[str, ...]:
        """Names of the alerts that can actually be played."""
        return tuple(name for name in SOUND_NAMES if name in self._effects)

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_volume(self, level: int) -> None:
        """0-100, clamped."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    def _cached_files(self) -> dict[str, Path]:
        """Write any missing WAV file and return the ones on disk."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Sounds disabled, cannot create %s: %s", self._sounds_dir, exc)
            return {}

        files: dict[str, Path] = {}
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                try:
                    path.write_bytes(_GENERATORS[name]())
                except OSError as exc:
                    logger.warning("Could not write sound %s: %s", path, exc)
                    continue
            files[name] = path
        return files
