"""Break activities package."""

from .activities import (
    BreakActivityManager,
    BreakActivity,
    Category,
    BUILT_IN_ACTIVITIES,
)

__all__ = [
    "BreakActivityManager",
    "BreakActivity",
    "Category",
    "BUILT_IN_ACTIVITIES",
]
