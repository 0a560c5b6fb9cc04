"""Named timer presets (work / break / long break / cycles bundles).

Built-in presets are defined in code with stable ids.  Custom presets are
stored in the ``presets`` table; the current preset id lives in
:class:`~focusly.settings.Settings` so it survives restarts.

The timer consults :attr:`PresetManager.current_preset` only when a work
phase ends, to decide whether the coming break is a long one.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace

from ..database.db import get_session
from ..database.models import PresetRecord
from ..errors import PresetError
from ..settings import Settings, SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerPreset:
    id: str
    name: str
    work_duration: float                      # seconds
    break_duration: float
    max_cycles: int
    long_break_duration: float | None = None
    icon: str = "timer"
    color: str = "blue"
    is_built_in: bool = False

    @property
    def work_minutes(self) -> int:
        return int(self.work_duration // 60)

    @property
    def break_minutes(self) -> int:
        return int(self.break_duration // 60)

    @property
    def description(self) -> str:
        return f"{self.work_minutes}m work / {self.break_minutes}m break × {self.max_cycles}"


def _built_in(key, name, work, brk, long_brk, cycles, icon, color) -> TimerPreset:
    return TimerPreset(
        id=key,
        name=name,
        work_duration=work * 60,
        break_duration=brk * 60,
        long_break_duration=long_brk * 60,
        max_cycles=cycles,
        icon=icon,
        color=color,
        is_built_in=True,
    )


# ── 8 built-in presets ──────────────────────────────────────────────────

CLASSIC_POMODORO = _built_in("classic_pomodoro", "Classic Pomodoro", 25, 5, 15, 4, "timer", "red")
DEEP_WORK = _built_in("deep_work", "Deep Work", 50, 10, 20, 4, "brain.head.profile", "purple")
ULTRA_FOCUS = _built_in("ultra_focus", "Ultra Focus", 90, 15, 30, 3, "flame.fill", "orange")
SHORT_SPRINT = _built_in("short_sprint", "Short Sprint", 15, 3, 10, 6, "hare.fill", "green")
STUDY_SESSION = _built_in("study_session", "Study Session", 45, 10, 20, 4, "book.fill", "blue")
LONG_BREAK = _built_in("long_break", "Long Break", 30, 15, 30, 3, "moon.stars.fill", "purple")
CREATIVE_FLOW = _built_in("creative_flow", "Creative Flow", 60, 12, 25, 3, "paintbrush.fill", "pink")
QUICK_BURSTS = _built_in("quick_bursts", "Quick Bursts", 10, 2, 5, 8, "bolt.fill", "yellow")

BUILT_IN_PRESETS: list[TimerPreset] = [
    CLASSIC_POMODORO,
    DEEP_WORK,
    ULTRA_FOCUS,
    SHORT_SPRINT,
    STUDY_SESSION,
    LONG_BREAK,
    CREATIVE_FLOW,
    QUICK_BURSTS,
]

DEFAULT_PRESET = DEEP_WORK


def new_preset_id() -> str:
    return uuid.uuid4().hex


# ── manager ──────────────────────────────────────────────────────────────


class PresetManager:
    """Loads, edits, and selects presets.

    Parameters
    ----------
    store:
        Optional settings store.  When given, the current preset id is
        read from and written to it, and :meth:`apply_preset` copies the
        preset's durations into the settings.
    """

    def __init__(self, store: SettingsStore | None = None) -> None:
        self._store = store
        self._presets: list[TimerPreset] = self._load_custom() + list(BUILT_IN_PRESETS)

        current_id = store.settings.current_preset_id if store else DEFAULT_PRESET.id
        self._current = self.get(current_id) or DEFAULT_PRESET

    # ── queries ───────────────────────────────────────────────────────

    @property
    def presets(self) -> list[TimerPreset]:
        return list(self._presets)

    @property
    def current_preset(self) -> TimerPreset:
        return self._current

    @property
    def custom_presets(self) -> list[TimerPreset]:
        return [p for p in self._presets if not p.is_built_in]

    @property
    def built_in_presets(self) -> list[TimerPreset]:
        return [p for p in self._presets if p.is_built_in]

    def get(self, preset_id: str) -> TimerPreset | None:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        return None

    # ── edits ─────────────────────────────────────────────────────────

    def add_preset(self, preset: TimerPreset) -> TimerPreset:
        """Store a custom preset.  ``is_built_in`` is forced off."""
        if preset.is_built_in or self.get(preset.id) is not None:
            preset = replace(preset, id=new_preset_id(), is_built_in=False)
        self._presets.insert(len(self.custom_presets), preset)
        self._save_custom()
        logger.info("Added preset %r", preset.name)
        return preset

    def update_preset(self, preset: TimerPreset) -> None:
        existing = self.get(preset.id)
        if existing is None:
            raise PresetError(f"Unknown preset {preset.id!r}")
        if existing.is_built_in:
            raise PresetError(f"Built-in preset {existing.name!r} cannot be edited")

        index = self._presets.index(existing)
        self._presets[index] = replace(preset, is_built_in=False)
        self._save_custom()

        if self._current.id == preset.id:
            self.set_current_preset(self._presets[index])

    def delete_preset(self, preset: TimerPreset) -> None:
        if preset.is_built_in:
            raise PresetError(f"Built-in preset {preset.name!r} cannot be deleted")
        self._presets = [p for p in self._presets if p.id != preset.id]
        self._save_custom()

        if self._current.id == preset.id:
            self.set_current_preset(DEFAULT_PRESET)

    def set_current_preset(self, preset: TimerPreset) -> None:
        self._current = preset
        if self._store is not None:
            self._store.update(current_preset_id=preset.id)

    def apply_preset(self, preset: TimerPreset) -> None:
        """Select *preset* and copy its durations into the settings."""
        self.set_current_preset(preset)
        if self._store is not None:
            self._store.update(
                work_duration=preset.work_duration,
                break_duration=preset.break_duration,
                max_cycles=preset.max_cycles,
            )
        logger.info("Applied preset %r (%s)", preset.name, preset.description)

    # ── persistence ───────────────────────────────────────────────────

    @staticmethod
    def _load_custom() -> list[TimerPreset]:
        with get_session() as db:
            rows = db.query(PresetRecord).order_by(PresetRecord.position).all()
            return [
                TimerPreset(
                    id=row.id,
                    name=row.name,
                    work_duration=row.work_duration,
                    break_duration=row.break_duration,
                    long_break_duration=row.long_break_duration,
                    max_cycles=row.max_cycles,
                    icon=row.icon,
                    color=row.color,
                )
                for row in rows
            ]

    def _save_custom(self) -> None:
        """Rewrite the custom preset table (only custom presets are stored)."""
        with get_session() as db:
            db.query(PresetRecord).delete()
            for position, preset in enumerate(self.custom_presets):
                db.add(PresetRecord(
                    id=preset.id,
                    name=preset.name,
                    work_duration=preset.work_duration,
                    break_duration=preset.break_duration,
                    long_break_duration=preset.long_break_duration,
                    max_cycles=preset.max_cycles,
                    icon=preset.icon,
                    color=preset.color,
                    position=position,
                ))


def preset_from_settings(settings: Settings, name: str = "Custom") -> TimerPreset:
    """Snapshot the current settings as a new (unsaved) custom preset."""
    return TimerPreset(
        id=new_preset_id(),
        name=name,
        work_duration=settings.work_duration,
        break_duration=settings.break_duration,
        max_cycles=settings.max_cycles,
    )
