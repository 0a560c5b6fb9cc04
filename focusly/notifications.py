"""User-facing notifications.

Notifications are shown through a ``QSystemTrayIcon`` balloon when one is
attached, and are always emitted as ``posted`` so tests and other widgets
can observe them without a tray.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QSystemTrayIcon

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class NotificationType(Enum):
    TASK_DUE = "task_due"
    TASK_OVERDUE = "task_overdue"
    CALENDAR_REMINDER = "calendar_reminder"
    DAILY_SUMMARY = "daily_summary"
    WEEKLY_SUMMARY = "weekly_summary"
    ACHIEVEMENT = "achievement"
    BREAK_TIME = "break_time"
    BREAK_COMPLETE = "break_complete"
    SESSION_COMPLETE = "session_complete"


@dataclass(frozen=True)
class Notification:
    kind: NotificationType
    title: str
    body: str
    posted_at: datetime = field(default_factory=datetime.now)


class NotificationManager(QObject):
    """Posts notifications for timer, task, calendar and summary events.

    Signals
    -------
    posted(Notification)
        Emitted for every notification, whether or not a tray icon showed it.
    """

    posted = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        tray_icon: QSystemTrayIcon | None = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        super().__init__(parent)
        self._tray_icon = tray_icon
        self._history: deque[Notification] = deque(maxlen=history_limit)

    def attach_tray_icon(self, tray_icon: QSystemTrayIcon | None) -> None:
        self._tray_icon = tray_icon

    @property
    def history(self) -> list[Notification]:
        """Posted notifications, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    # ── timer ─────────────────────────────────────────────────────────

    def notify_break_time(self, duration: float) -> Notification:
        return self._post(
            NotificationType.BREAK_TIME,
            "Break Time!",
            f"Take a {int(duration // 60)} minute break \U0001F9D8",
        )

    def notify_break_complete(self) -> Notification:
        return self._post(
            NotificationType.BREAK_COMPLETE,
            "Break Over",
            "Time to get back to work \U0001F4AA",
        )

    def notify_session_complete(self, cycles: int) -> Notification:
        return self._post(
            NotificationType.SESSION_COMPLETE,
            "Session Complete!",
            f"\U0001F389 Great job! You completed {cycles} work blocks",
        )

    def notify_achievement(self, description: str) -> Notification:
        return self._post(NotificationType.ACHIEVEMENT, "Achievement Unlocked!", description)

    # ── tasks & calendar ──────────────────────────────────────────────

    def notify_task_due(self, task) -> Notification:
        return self._post(NotificationType.TASK_DUE, "Task Due Soon", f"\U0001F4CB {task.title}")

    def notify_overdue_tasks(self, overdue_count: int) -> Notification | None:
        if overdue_count <= 0:
            return None
        plural = "s" if overdue_count > 1 else ""
        return self._post(
            NotificationType.TASK_OVERDUE,
            "Overdue Tasks",
            f"⚠️ You have {overdue_count} overdue task{plural}",
        )

    def notify_calendar_reminder(self, event, minutes_before: int = 15) -> Notification:
        return self._post(
            NotificationType.CALENDAR_REMINDER,
            "Upcoming Meeting",
            f"\U0001F4C5 {event.title} in {minutes_before} minutes",
        )

    # ── summaries ─────────────────────────────────────────────────────

    def notify_daily_summary(self, stats) -> Notification:
        if stats.total_focus_time > 0:
            body = (
                f"\U0001F3AF Today: {stats.formatted_focus_time} of focus time "
                f"across {stats.sessions_completed} sessions"
            )
        else:
            body = "\U0001F4A1 No focus sessions today. Try one tomorrow!"
        return self._post(NotificationType.DAILY_SUMMARY, "Daily Summary", body)

    def notify_weekly_summary(self, total_hours: float, sessions: int, streak: int) -> Notification:
        body = (
            f"\U0001F4CA This week: {total_hours:.1f} hours focused, "
            f"{sessions} sessions completed, {streak} day streak \U0001F525"
        )
        return self._post(NotificationType.WEEKLY_SUMMARY, "Weekly Progress", body)

    # ── delivery ──────────────────────────────────────────────────────

    def _post(self, kind: NotificationType, title: str, body: str) -> Notification:
        notification = Notification(kind, title, body)
        self._history.append(notification)
        if self._tray_icon is not None and self._tray_icon.isVisible():
            self._tray_icon.showMessage(title, body)
        logger.debug("Notification [%s] %s: %s", kind.value, title, body)
        self.posted.emit(notification)
        return notification
