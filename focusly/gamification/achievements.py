"""Achievements announced after completed focus sessions.

Achievement Catalog
-------------------
    First Focus      complete your first session
    Getting Started  10 sessions logged
    Hot Streak       7 days in a row
    Power User       100 hours of focus

Persistence
-----------
Announced achievements are stored in the ``Achievement`` table so each one
is reported exactly once.  ``AchievementManager.check_achievements`` is the
evaluator the timer calls after logging a completed session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..database.db import get_session
from ..database.models import Achievement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementDef:
    key: str
    name: str
    emoji: str
    description: str
    is_earned: Callable[[object], bool]   # receives the StatisticsManager

    @property
    def message(self) -> str:
        return f"{self.emoji} {self.name} - {self.description}"


ACHIEVEMENTS: list[AchievementDef] = [
    AchievementDef(
        key="first_focus",
        name="First Focus",
        emoji="\U0001F3C6",
        description="Completed your first session!",
        is_earned=lambda stats: stats.total_sessions >= 1,
    ),
    AchievementDef(
        key="getting_started",
        name="Getting Started",
        emoji="⭐",
        description="10 focus sessions logged!",
        is_earned=lambda stats: stats.total_sessions >= 10,
    ),
    AchievementDef(
        key="hot_streak",
        name="Hot Streak",
        emoji="\U0001F525",
        description="7 days in a row!",
        is_earned=lambda stats: stats.current_streak >= 7,
    ),
    AchievementDef(
        key="power_user",
        name="Power User",
        emoji="\U0001F680",
        description="100 hours of focus!",
        is_earned=lambda stats: stats.total_focus_time >= 100 * 3600,
    ),
]


class AchievementManager:
    """Checks eligibility against statistics and records unlocks."""

    def __init__(self, statistics) -> None:
        self._statistics = statistics

    def check_achievements(self) -> list[str]:
        """Unlock everything earned but not yet announced.

        Returns the messages of the newly unlocked achievements.
        """
        with get_session() as db:
            existing = {a.key for a in db.query(Achievement).all()}

            messages: list[str] = []
            for achievement in ACHIEVEMENTS:
                if achievement.key in existing:
                    continue
                if achievement.is_earned(self._statistics):
                    db.add(Achievement(key=achievement.key, unlocked_at=datetime.now()))
                    messages.append(achievement.message)
                    logger.info("Achievement unlocked: %s", achievement.name)

            return messages

    def unlocked_keys(self) -> set[str]:
        with get_session() as db:
            return {a.key for a in db.query(Achievement).all()}

    def is_unlocked(self, key: str) -> bool:
        return key in self.unlocked_keys()
