"""Break activity catalog and suggestions.

When a break starts the timer asks :meth:`BreakActivityManager.suggest_activity`
for something to do.  Suggestions only include activities that fit in the
break and favour the ones done least often, so the catalog gets rotated.

Built-in activities have fixed UUIDs so completion counts survive restarts.
Custom activities and completion counts are stored in the database.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum

from ..database.db import get_session
from ..database.models import ActivityCompletion, BreakActivityRecord

logger = logging.getLogger(__name__)

SUGGESTION_POOL_SIZE = 5


class Category(Enum):
    PHYSICAL = "physical"
    MENTAL = "mental"
    SOCIAL = "social"
    CREATIVE = "creative"
    HEALTH = "health"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        return _CATEGORY_ICONS[self]


_CATEGORY_ICONS: dict[Category, str] = {
    Category.PHYSICAL: "figure.walk",
    Category.MENTAL: "brain.head.profile",
    Category.SOCIAL: "person.2.fill",
    Category.CREATIVE: "paintbrush.fill",
    Category.HEALTH: "heart.fill",
}


@dataclass(frozen=True)
class BreakActivity:
    title: str
    description: str
    duration: int               # minutes
    category: Category
    icon: str = "sparkles"
    is_custom: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


def _built_in(digit: str, title, description, duration, category, icon) -> BreakActivity:
    uid = "-".join(digit * n for n in (8, 4, 4, 4, 12))
    return BreakActivity(
        id=uid,
        title=title,
        description=description,
        duration=duration,
        category=category,
        icon=icon,
        is_custom=False,
    )


BUILT_IN_ACTIVITIES: list[BreakActivity] = [
    # Physical
    _built_in("1", "Stretch", "Stand up and stretch your arms, neck, and back",
              5, Category.PHYSICAL, "figure.flexibility"),
    _built_in("2", "Quick Walk", "Take a short walk around your space",
              10, Category.PHYSICAL, "figure.walk"),
    _built_in("3", "Desk Exercises", "Do 10 pushups, squats, or desk yoga",
              5, Category.PHYSICAL, "dumbbell.fill"),
    # Mental
    _built_in("4", "20-20-20 Rule", "Look at something 20 feet away for 20 seconds",
              1, Category.MENTAL, "eye.fill"),
    _built_in("5", "Deep Breathing", "Take 5 deep breaths: inhale for 4, hold for 4, exhale for 4",
              2, Category.MENTAL, "wind"),
    _built_in("6", "Quick Meditation", "Close your eyes and focus on your breath",
              5, Category.MENTAL, "sparkles"),
    # Health
    _built_in("7", "Hydrate", "Drink a full glass of water",
              2, Category.HEALTH, "drop.fill"),
    _built_in("8", "Healthy Snack", "Eat some fruit, nuts, or a healthy snack",
              5, Category.HEALTH, "leaf.fill"),
    # Social
    _built_in("9", "Quick Chat", "Have a brief conversation with someone",
              5, Category.SOCIAL, "message.fill"),
    _built_in("a", "Call Someone", "Make a quick call to a friend or family member",
              10, Category.SOCIAL, "phone.fill"),
    # Creative
    _built_in("b", "Doodle", "Draw or sketch something for fun",
              5, Category.CREATIVE, "pencil.and.outline"),
    _built_in("c", "Listen to Music", "Play your favorite song and enjoy",
              5, Category.CREATIVE, "music.note"),
]


class BreakActivityManager:
    """Catalog of break activities plus completion tracking."""

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._activities: list[BreakActivity] = self._load_custom()
        for builtin in BUILT_IN_ACTIVITIES:
            if all(a.id != builtin.id for a in self._activities):
                self._activities.append(builtin)
        self._completed: dict[str, int] = self._load_completed()

    # ── catalog ───────────────────────────────────────────────────────

    @property
    def activities(self) -> list[BreakActivity]:
        return list(self._activities)

    @property
    def custom_activities(self) -> list[BreakActivity]:
        return [a for a in self._activities if a.is_custom]

    @property
    def built_in_activities(self) -> list[BreakActivity]:
        return [a for a in self._activities if not a.is_custom]

    def activities_by_category(self, category: Category) -> list[BreakActivity]:
        return [a for a in self._activities if a.category is category]

    def add_activity(self, activity: BreakActivity) -> None:
        self._activities.append(activity)
        self._save_custom()

    def update_activity(self, activity: BreakActivity) -> None:
        for index, existing in enumerate(self._activities):
            if existing.id == activity.id:
                self._activities[index] = activity
                self._save_custom()
                return

    def delete_activity(self, activity: BreakActivity) -> None:
        """Remove a custom activity.  Built-ins are left alone."""
        if not activity.is_custom:
            return
        self._activities = [a for a in self._activities if a.id != activity.id]
        self._save_custom()

    # ── suggestions ───────────────────────────────────────────────────

    def suggest_activity(self, duration: float) -> BreakActivity:
        """Pick something that fits in a break of *duration* seconds."""
        break_minutes = int(duration // 60)
        suitable = [a for a in self._activities if a.duration <= break_minutes]
        suitable.sort(key=lambda a: self._completed.get(a.id, 0))
        pool = suitable[:SUGGESTION_POOL_SIZE]
        if not pool:
            return BUILT_IN_ACTIVITIES[0]
        return self._rng.choice(pool)

    def suggest_random_activity(self) -> BreakActivity:
        if not self._activities:
            return BUILT_IN_ACTIVITIES[0]
        return self._rng.choice(self._activities)

    def mark_activity_completed(self, activity: BreakActivity) -> None:
        count = self._completed.get(activity.id, 0) + 1
        self._completed[activity.id] = count
        with get_session() as db:
            db.merge(ActivityCompletion(activity_id=activity.id, count=count))
        logger.debug("Break activity %r done %d times", activity.title, count)

    # ── statistics ────────────────────────────────────────────────────

    def completion_count(self, activity: BreakActivity) -> int:
        return self._completed.get(activity.id, 0)

    @property
    def most_completed_activity(self) -> BreakActivity | None:
        if not self._completed:
            return None
        top_id = max(self._completed, key=self._completed.get)
        for activity in self._activities:
            if activity.id == top_id:
                return activity
        return None

    @property
    def total_activities_completed(self) -> int:
        return sum(self._completed.values())

    # ── persistence ───────────────────────────────────────────────────

    @staticmethod
    def _load_custom() -> list[BreakActivity]:
        with get_session() as db:
            rows = db.query(BreakActivityRecord).order_by(BreakActivityRecord.position).all()
            return [
                BreakActivity(
                    id=row.id,
                    title=row.title,
                    description=row.description,
                    duration=row.duration,
                    category=Category(row.category),
                    icon=row.icon,
                    is_custom=True,
                )
                for row in rows
            ]

    def _save_custom(self) -> None:
        with get_session() as db:
            db.query(BreakActivityRecord).delete()
            for position, activity in enumerate(self.custom_activities):
                db.add(BreakActivityRecord(
                    id=activity.id,
                    title=activity.title,
                    description=activity.description,
                    duration=activity.duration,
                    category=activity.category.value,
                    icon=activity.icon,
                    position=position,
                ))

    @staticmethod
    def _load_completed() -> dict[str, int]:
        with get_session() as db:
            return {row.activity_id: row.count for row in db.query(ActivityCompletion).all()}
