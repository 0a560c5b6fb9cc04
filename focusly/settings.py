"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/Focusly/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)

Code that wants to react to changes (tray visibility, sound volume) goes
through a :class:`SettingsStore` instead of assigning fields directly::

    store = SettingsStore(settings)
    store.changed.connect(on_setting_changed)
    store.update(work_duration=25 * 60)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "Focusly"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

DEFAULT_WORK_DURATION = 50 * 60
DEFAULT_BREAK_DURATION = 10 * 60
DEFAULT_MAX_CYCLES = 4
DEFAULT_SOUND_VOLUME = 50


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: float = DEFAULT_WORK_DURATION      # seconds
    break_duration: float = DEFAULT_BREAK_DURATION
    max_cycles: int = DEFAULT_MAX_CYCLES
    current_preset_id: str = "deep_work"

    # ── display ───────────────────────────────────────────────────────
    show_time_display: bool = True
    show_break_overlay: bool = True
    show_break_activities: bool = True
    show_floating_timer_on_all_screens: bool = True
    launch_at_login: bool = False

    # ── notifications ─────────────────────────────────────────────────
    break_notifications: bool = True
    session_complete_notifications: bool = True
    task_due_notifications: bool = True
    task_overdue_notifications: bool = True
    calendar_reminders: bool = True
    calendar_reminder_minutes: int = 15
    daily_summary_notifications: bool = True
    weekly_summary_notifications: bool = True
    achievement_notifications: bool = True

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = DEFAULT_SOUND_VOLUME          # 0-100
    work_complete_sound: str = "work_complete"
    break_complete_sound: str = "break_time"
    session_complete_sound: str = "celebration"

    def sanitized(self) -> Settings:
        """Return a copy with out-of-range values replaced by defaults.

        Each field is checked on its own, so one bad value never costs the
        others.
        """
        return replace(
            self,
            work_duration=_positive(self.work_duration, DEFAULT_WORK_DURATION),
            break_duration=_positive(self.break_duration, DEFAULT_BREAK_DURATION),
            max_cycles=_whole(self.max_cycles, DEFAULT_MAX_CYCLES, minimum=1),
            calendar_reminder_minutes=_whole(self.calendar_reminder_minutes, 15, minimum=1),
            sound_volume=_volume(self.sound_volume),
        )


def _positive(value, default):
    try:
        return value if value > 0 else default
    except TypeError:
        return default


def _whole(value, default: int, *, minimum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number >= minimum else default


def _volume(value) -> int:
    try:
        return max(0, min(int(value), 100))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_SOUND_VOLUME


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered).sanitized()
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


class SettingsStore(QObject):
    """Owns the live :class:`Settings` instance and announces changes.

    The same ``Settings`` object is handed to the timer, so values updated
    here are visible on the timer's next read.

    Signals
    -------
    changed(name: str, value: object)
        Emitted once per field whose value actually changed.
    """

    changed = pyqtSignal(str, object)

    def __init__(
        self,
        settings: Settings | None = None,
        parent: QObject | None = None,
        *,
        path: Path | None = None,
        autosave: bool = True,
    ) -> None:
        super().__init__(parent)
        self._settings = settings if settings is not None else Settings()
        self._path = path
        self._autosave = autosave

    @property
    def settings(self) -> Settings:
        return self._settings

    def update(self, **changes) -> list[str]:
        """Apply *changes*, sanitize, persist, and emit ``changed``.

        Returns the names of the fields that changed.  Unknown names raise
        ``AttributeError``.
        """
        valid_keys = {f.name for f in fields(Settings)}
        unknown = set(changes) - valid_keys
        if unknown:
            raise AttributeError(f"Unknown settings: {', '.join(sorted(unknown))}")

        candidate = replace(self._settings, **changes).sanitized()
        changed_names = [
            name for name in valid_keys
            if getattr(candidate, name) != getattr(self._settings, name)
        ]
        changed_names.sort()
        for name in changed_names:
            setattr(self._settings, name, getattr(candidate, name))

        if changed_names and self._autosave:
            save_settings(self._settings, self._path)
        for name in changed_names:
            logger.debug("Setting %s changed to %r", name, getattr(self._settings, name))
            self.changed.emit(name, getattr(self._settings, name))
        return changed_names
