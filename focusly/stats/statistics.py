"""Focus session log and aggregate statistics.

Every session the timer reports (completed or stopped early) becomes one
``FocusSession`` row.  Aggregates are recomputed after each write:

- ``total_focus_time``  sum of work seconds over all sessions
- ``total_sessions``    number of logged sessions
- ``current_streak``    consecutive days with a session, counting back
                        from today (0 if nothing was logged today)
- ``longest_streak``    longest run of consecutive session days ever
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable

from PyQt6.QtCore import QObject, pyqtSignal

from ..database.db import get_session
from ..database.models import FocusSession

logger = logging.getLogger(__name__)


def format_focus_time(seconds: float) -> str:
    """``3900`` → ``"1h 5m"``; ``2700`` → ``"45m"``."""
    total = max(0, int(seconds))
    hours, minutes = total // 3600, (total % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


@dataclass(frozen=True)
class DailyStats:
    date: date
    total_focus_time: float
    sessions_completed: int
    cycles_completed: int

    @property
    def formatted_focus_time(self) -> str:
        return format_focus_time(self.total_focus_time)


def compute_streaks(days: Iterable[date], today: date) -> tuple[int, int]:
    """Return ``(current_streak, longest_streak)`` for a set of session days."""
    day_set = set(days)
    if not day_set:
        return (0, 0)

    current = 0
    check = today
    while check in day_set:
        current += 1
        check -= timedelta(days=1)

    longest = run = 0
    previous: date | None = None
    for day in sorted(day_set):
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    return (current, longest)


class StatisticsManager(QObject):
    """Persists focus sessions and answers statistics queries.

    Signals
    -------
    stats_changed()
        Emitted after sessions were logged or cleared.
    """

    stats_changed = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(parent)
        self._today = today
        self.total_focus_time: float = 0.0
        self.total_sessions: int = 0
        self.current_streak: int = 0
        self.longest_streak: int = 0
        self.calculate_stats()

    # ── session log ───────────────────────────────────────────────────

    def log_session(
        self,
        duration: float,
        break_duration: float,
        cycles_completed: int,
        was_completed: bool,
        task_label: str | None = None,
        *,
        when: datetime | None = None,
    ) -> FocusSession:
        with get_session() as db:
            record = FocusSession(
                date=when or datetime.now(),
                duration=duration,
                break_duration=break_duration,
                cycles_completed=cycles_completed,
                was_completed=was_completed,
                task_label=task_label or None,
            )
            db.add(record)
        logger.info(
            "Logged %s session: %.0fs over %d cycles",
            "completed" if was_completed else "partial", duration, cycles_completed,
        )
        self.calculate_stats()
        self.stats_changed.emit()
        return record

    def sessions(self) -> list[FocusSession]:
        """All logged sessions, most recent first."""
        with get_session() as db:
            return (
                db.query(FocusSession)
                .order_by(FocusSession.date.desc(), FocusSession.id.desc())
                .all()
            )

    def clear_all_stats(self) -> None:
        with get_session() as db:
            db.query(FocusSession).delete()
        logger.info("Cleared all statistics")
        self.calculate_stats()
        self.stats_changed.emit()

    # ── aggregates ────────────────────────────────────────────────────

    def calculate_stats(self) -> None:
        sessions = self.sessions()
        self.total_focus_time = sum(s.duration for s in sessions)
        self.total_sessions = len(sessions)
        self.current_streak, self.longest_streak = compute_streaks(
            (s.date.date() for s in sessions), self._today(),
        )

    def daily_stats(self, day: date) -> DailyStats:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        with get_session() as db:
            day_sessions = (
                db.query(FocusSession)
                .filter(FocusSession.date >= start, FocusSession.date < end)
                .all()
            )
        return DailyStats(
            date=day,
            total_focus_time=sum(s.duration for s in day_sessions),
            sessions_completed=sum(1 for s in day_sessions if s.was_completed),
            cycles_completed=sum(s.cycles_completed for s in day_sessions),
        )

    def weekly_stats(self) -> list[DailyStats]:
        """Last 7 days including today, oldest first."""
        return self._range_stats(7)

    def monthly_stats(self) -> list[DailyStats]:
        """Last 30 days including today, oldest first."""
        return self._range_stats(30)

    def _range_stats(self, days: int) -> list[DailyStats]:
        today = self._today()
        return [
            self.daily_stats(today - timedelta(days=offset))
            for offset in reversed(range(days))
        ]

    # ── export ────────────────────────────────────────────────────────

    def export_csv(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow([
            "Date", "Duration (minutes)", "Break Duration (minutes)",
            "Cycles", "Completed", "Task",
        ])
        for s in self.sessions():
            writer.writerow([
                s.date.strftime("%Y-%m-%d %H:%M"),
                int(s.duration // 60),
                int(s.break_duration // 60),
                s.cycles_completed,
                "Yes" if s.was_completed else "No",
                s.task_label or "",
            ])
        return buf.getvalue()

    def export_json(self) -> str:
        return json.dumps(
            [
                {
                    "id": s.id,
                    "date": s.date.isoformat(),
                    "duration": s.duration,
                    "break_duration": s.break_duration,
                    "cycles_completed": s.cycles_completed,
                    "was_completed": s.was_completed,
                    "task_label": s.task_label,
                }
                for s in self.sessions()
            ],
            indent=2,
        )
