"""Statistics package."""

from .statistics import (
    StatisticsManager,
    DailyStats,
    compute_streaks,
    format_focus_time,
)

__all__ = [
    "StatisticsManager",
    "DailyStats",
    "compute_streaks",
    "format_focus_time",
]
