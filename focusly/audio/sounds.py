"""Transition sounds for the timer.

Each sound is a short phrase of sine partials rendered with numpy and
written once to a WAV cache under the app support directory; playback
goes through ``QSoundEffect``.

Sound types
-----------
- ``none``              silence (disables a slot)
- ``work_complete``     bright rising arpeggio
- ``break_time``        soft glass bell
- ``session_complete``  held major chord
- ``gentle``            single soft tink
- ``notification``      two-tone ping
- ``celebration``       full fanfare for a finished session

The timer plays one sound per transition; which type each transition uses
is a user setting (``work_complete_sound``, ``break_complete_sound``,
``session_complete_sound``).
"""

from __future__ import annotations

import io
import logging
import wave
from enum import Enum
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SAMPLE_RATE = 44100


class SoundType(Enum):
    NONE = "none"
    WORK_COMPLETE = "work_complete"
    BREAK_TIME = "break_time"
    SESSION_COMPLETE = "session_complete"
    GENTLE = "gentle"
    NOTIFICATION = "notification"
    CELEBRATION = "celebration"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_value(cls, value: str, default: SoundType) -> SoundType:
        """Parse a stored setting, falling back to *default*."""
        try:
            return cls(value)
        except ValueError:
            return default


_LABELS: dict[SoundType, str] = {
    SoundType.NONE: "None",
    SoundType.WORK_COMPLETE: "Work Complete",
    SoundType.BREAK_TIME: "Break Time",
    SoundType.SESSION_COMPLETE: "Session Complete",
    SoundType.GENTLE: "Gentle",
    SoundType.NOTIFICATION: "Notification",
    SoundType.CELEBRATION: "Celebration",
}


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    n: int,
    attack: float = 0.005,
    decay: float = 0.05,
    sustain: float = 0.5,
    release: float = 0.1,
) -> np.ndarray:
    """ADSR gain curve over *n* samples.  Stage lengths are in seconds."""
    last = max(n - 1, 0)
    a = min(int(attack * SAMPLE_RATE), last)
    d = min(a + int(decay * SAMPLE_RATE), last)
    r = min(max(last - int(release * SAMPLE_RATE), d), last)
    return np.interp(np.arange(n), [0, a, d, r, last], [0.0, 1.0, sustain, sustain, 0.0])


def _tone(partials, seconds: float, gain: float, **adsr) -> np.ndarray:
    """Sum of ``(frequency, weight)`` sine partials shaped by an envelope."""
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    mix = sum(weight * np.sin(2 * np.pi * freq * t) for freq, weight in partials)
    return gain * mix * _envelope(len(t), **adsr)


def _rest(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _render(*segments: np.ndarray) -> bytes:
    """Join segments into mono 16-bit PCM WAV bytes, scaling down any clipping."""
    samples = np.concatenate(segments)
    peak = float(np.abs(samples).max(initial=0.0))
    if peak > 1.0:
        samples = samples / peak
    pcm = np.round(samples * 32767).astype("<i2")

    buf = io.BytesIO()
    with wave.open(buf, "wb") as out:
        out.setparams((1, 2, SAMPLE_RATE, len(pcm), "NONE", "not compressed"))
        out.writeframes(pcm.tobytes())
    return buf.getvalue()


# note frequencies (Hz)
G4, B4, C5, D5, E5, FS5, G5, A5, D6, E6 = (
    392.00, 493.88, 523.25, 587.33, 659.25, 739.99, 783.99, 880.00, 1174.66, 1318.51,
)


def _arpeggio(notes, step: float, gap: float, final: np.ndarray) -> list[np.ndarray]:
    parts: list[np.ndarray] = []
    for freq in notes:
        parts += [_tone([(freq, 1.0)], step, 0.5, attack=0.002, decay=0.004, sustain=0.35), _rest(gap)]
    parts.append(final)
    return parts


def _work_complete() -> bytes:
    """D major arpeggio up to a held D6."""
    held = _tone([(D6, 1.0)], 0.4, 0.5, attack=0.002, decay=0.007, sustain=0.5, release=0.016)
    return _render(*_arpeggio([D5, FS5, A5], 0.1, 0.02, held))


def _glass_bell() -> bytes:
    return _render(_tone([(E5, 0.35), (E5 * 2, 0.07)], 1.2, 1.0,
                         attack=0.01, decay=0.35, sustain=0.2, release=0.7))


def _major_chord() -> bytes:
    return _render(_tone([(C5, 0.22), (E5, 0.22), (G5, 0.22)], 0.9, 1.0,
                         attack=0.02, decay=0.2, sustain=0.5, release=0.5))


def _tink() -> bytes:
    click = _tone([(1500.0, 1.0)], 0.05, 0.25, attack=0.001, decay=0.02, sustain=0.15, release=0.014)
    return _render(click, _rest(0.05))


def _ping() -> bytes:
    """A5 then E6, both with a long tail."""
    return _render(
        _tone([(A5, 1.0)], 0.08, 0.4, attack=0.001, sustain=0.3, release=0.027),
        _rest(0.03),
        _tone([(E6, 1.0)], 0.15, 0.4, attack=0.001, sustain=0.3, release=0.057),
        _rest(0.05),
    )


def _fanfare() -> bytes:
    """G major run that lands on a G5 with its octave."""
    held = _tone([(G5, 0.55), (G5 * 2, 0.1)], 0.5, 1.0, attack=0.002, decay=0.009, sustain=0.5, release=0.018)
    return _render(*_arpeggio([G4, B4, D5], 0.15, 0.03, held))


_GENERATORS: dict[SoundType, callable] = {
    SoundType.WORK_COMPLETE: _work_complete,
    SoundType.BREAK_TIME: _glass_bell,
    SoundType.SESSION_COMPLETE: _major_chord,
    SoundType.GENTLE: _tink,
    SoundType.NOTIFICATION: _ping,
    SoundType.CELEBRATION: _fanfare,
}

# setting name -> sound used when the stored value is unknown
_TRANSITION_DEFAULTS: dict[str, SoundType] = {
    "work_complete_sound": SoundType.WORK_COMPLETE,
    "break_complete_sound": SoundType.BREAK_TIME,
    "session_complete_sound": SoundType.CELEBRATION,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Plays the timer's transition sounds from a WAV cache.

    Missing WAV files are synthesized into *sounds_dir* on construction;
    files already present are reused as-is.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.apply_settings(settings)
        mgr.play_work_complete_sound()
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self.sounds_dir = sounds_dir or SOUNDS_DIR
        self._enabled = True
        self._volume = 50
        self._choices = dict(_TRANSITION_DEFAULTS)
        self._effects: dict[SoundType, QSoundEffect] = {}

        self.sounds_dir.mkdir(parents=True, exist_ok=True)
        for sound_type in _GENERATORS:
            self._effects[sound_type] = self._load(sound_type)

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def enabled(self) -> bool:
        return self._enabled

    def choice(self, setting: str) -> SoundType:
        """The sound currently bound to a ``*_sound`` setting."""
        return self._choices[setting]

    # ── configuration ─────────────────────────────────────────────────

    def apply_settings(self, settings) -> None:
        self.set_enabled(settings.sound_enabled)
        self.set_volume(settings.sound_volume)
        for setting, fallback in _TRANSITION_DEFAULTS.items():
            self._choices[setting] = SoundType.from_value(getattr(settings, setting), fallback)

    def set_volume(self, level: int) -> None:
        """Clamp *level* to 0-100 and apply it to every effect."""
        self._volume = max(0, min(int(level), 100))
        for effect in self._effects.values():
            effect.setVolume(self._volume / 100)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    # ── playback ──────────────────────────────────────────────────────

    def play_work_complete_sound(self) -> None:
        self._play_transition("work_complete_sound")

    def play_break_complete_sound(self) -> None:
        self._play_transition("break_complete_sound")

    def play_session_complete_sound(self) -> None:
        self._play_transition("session_complete_sound")

    def preview_sound(self, sound_type: SoundType) -> None:
        """Play *sound_type* regardless of the enabled flag."""
        self._play(sound_type)

    def _play_transition(self, setting: str) -> None:
        if self._enabled:
            self._play(self._choices[setting])

    def _play(self, sound_type: SoundType) -> None:
        effect = self._effects.get(sound_type)
        if effect is None:
            return
        effect.play()

    def _load(self, sound_type: SoundType) -> QSoundEffect:
        path = self.sounds_dir / f"{sound_type.value}.wav"
        if not path.exists():
            path.write_bytes(_GENERATORS[sound_type]())
            logger.debug("Synthesized %s", path.name)
        effect = QSoundEffect(self)
        effect.setSource(QUrl.fromLocalFile(str(path)))
        effect.setVolume(self._volume / 100)
        return effect
