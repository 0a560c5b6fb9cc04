"""Timer package."""

from .engine import (
    TimerManager,
    TimerPhase,
    TICK_INTERVAL_MS,
    select_break_duration,
)
from .presets import (
    PresetManager,
    TimerPreset,
    BUILT_IN_PRESETS,
    DEFAULT_PRESET,
)

__all__ = [
    "TimerManager",
    "TimerPhase",
    "TICK_INTERVAL_MS",
    "select_break_duration",
    "PresetManager",
    "TimerPreset",
    "BUILT_IN_PRESETS",
    "DEFAULT_PRESET",
]
