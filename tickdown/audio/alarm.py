"""Timer-finished alarm: numpy synthesis + looping QSoundEffect.

The alarm tone is generated once as a WAV file and cached under the
data directory.  ``AlarmPlayer.start()`` loops it until ``stop()``.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl, pyqtSignal
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import data_dir

logger = logging.getLogger(__name__)

ALARM_FILENAME = "alarm.wav"
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
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


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


def generate_alarm() -> bytes:
    """Two-tone beep-beep (A5 / E6) followed by a short rest.

    One pass lasts about a second; the player loops it.
    """
    beep_dur = 0.18
    gap = 0.07
    parts: list[np.ndarray] = []
    for freq in (880.0, 1318.5, 880.0, 1318.5):
        tone = _sine(freq, beep_dur) * 0.55 + _sine(freq * 2, beep_dur) * 0.1
        env = _make_envelope(len(tone), attack=60, decay=300, sustain_level=0.8, release=400)
        parts.append(tone * env)
        parts.append(np.zeros(int(SAMPLE_RATE * gap)))
    parts.append(np.zeros(int(SAMPLE_RATE * 0.25)))
    return _to_wav_bytes(np.concatenate(parts))


# ═══════════════════════════════════════════════════════════════════════════
#  PLAYER
# ═══════════════════════════════════════════════════════════════════════════


class AlarmPlayer(QObject):
    """Rings until stopped.

    Usage::

        alarm = AlarmPlayer(parent=self)
        controller.timer_finished.connect(lambda _ago: alarm.start())
        ...
        alarm.stop()
    """

    ringing_changed = pyqtSignal(bool)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        volume: int = 80,
        enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._enabled = enabled
        self._volume = max(0, min(volume, 100)) / 100.0
        self._sounds_dir = sounds_dir or data_dir() / "sounds"
        self._ringing = False

        self._effect = QSoundEffect(self)
        self._effect.setLoopCount(QSoundEffect.Loop.Infinite.value)
        self._effect.setVolume(self._volume)

        path = self._ensure_wav_file()
        if path is not None:
            self._effect.setSource(QUrl.fromLocalFile(str(path)))

    # ── public API ────────────────────────────────────────────────────

    @property
    def is_ringing(self) -> bool:
        return self._ringing

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def wav_path(self) -> Path:
        return self._sounds_dir / ALARM_FILENAME

    def set_volume(self, level: int) -> None:
        """Set volume (0-100)."""
        self._volume = max(0, min(level, 100)) / 100.0
        self._effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self.stop()

    def start(self) -> None:
        """Start ringing.  No-op if disabled or already ringing."""
        if not self._enabled or self._ringing:
            return
        self._effect.play()
        self._ringing = True
        self.ringing_changed.emit(True)

    def stop(self) -> None:
        if not self._ringing:
            return
        self._effect.stop()
        self._ringing = False
        self.ringing_changed.emit(False)

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_file(self) -> Path | None:
        """Generate the cached WAV if missing.  Without it the alarm is silent."""
        path = self.wav_path
        try:
            if not path.exists():
                self._sounds_dir.mkdir(parents=True, exist_ok=True)
                path.write_bytes(generate_alarm())
        except OSError as exc:
            logger.warning("Alarm sound unavailable (%s); alarm will be silent", exc)
            return None
        return path
