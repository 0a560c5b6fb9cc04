"""Gamification package."""

from .achievements import (
    AchievementManager,
    AchievementDef,
    ACHIEVEMENTS,
)

__all__ = [
    "AchievementManager",
    "AchievementDef",
    "ACHIEVEMENTS",
]
