"""Focus/break state machine for Focusly.

States
------
IDLE        Not running; waiting for ``start()``.
WORKING     Work phase counting down.
ON_BREAK    Break phase counting down.

Transitions
-----------
IDLE → WORKING                 (start)
WORKING → ON_BREAK             (work phase ends, more cycles to go)
WORKING → IDLE                 (last work phase ends: session complete)
ON_BREAK → WORKING             (break ends, or skip_break_start_work)
WORKING | ON_BREAK → IDLE      (stop)

A session is ``max_cycles`` work phases with a break after every one but
the last.  The break that follows work phase *n* is a long break when *n*
is a multiple of the current preset's cadence (see
:func:`select_break_duration`).

Collaborators
-------------
Statistics, sounds, notifications, journal, achievements, presets, break
activities and tasks are all passed to the constructor.  Any of them may be
omitted; a no-op stand-in from :mod:`focusly.timer.sinks` is used instead.
Calls into collaborators are fire-and-forget: an exception is logged and
the transition carries on.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from PyQt6.QtCore import QObject, QTimer, Qt, pyqtSignal

from ..settings import Settings
from .sinks import (
    NullAchievements,
    NullBreakActivities,
    NullJournal,
    NullNotifications,
    NullPresets,
    NullSounds,
    NullStatistics,
    NullTasks,
)

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerPhase(Enum):
    IDLE = "idle"
    WORKING = "working"
    ON_BREAK = "on_break"


TICK_INTERVAL_MS = 1000


# ── long-break selection ──────────────────────────────────────────────────


def select_break_duration(
    next_cycle: int,
    preset,
    max_cycles: int,
    break_duration: float,
) -> float:
    """Return the length of the break that follows work phase *next_cycle*.

    The preset's ``max_cycles`` is the long-break cadence; the settings'
    *max_cycles* ends the session, and the final slot never gets a long
    break.  Without a preset, or a preset without a long break, the
    regular *break_duration* is used.
    """
    if preset is None or preset.long_break_duration is None:
        return break_duration
    if preset.max_cycles <= 0:
        return break_duration
    if next_cycle % preset.max_cycles == 0 and next_cycle < max_cycles:
        return preset.long_break_duration
    return break_duration


def _or_null(collaborator, null_type):
    return collaborator if collaborator is not None else null_type()


# ── manager ───────────────────────────────────────────────────────────────


class TimerManager(QObject):
    """Qt-driven focus timer with cycle counting and side-effect dispatch.

    Signals
    -------
    tick(remaining_seconds: float)
        Emitted after every one-second decrement.
    phase_changed(new_phase: TimerPhase)
        Emitted on every transition, and on start/stop.
    cycle_changed(current_cycle: int)
        Emitted whenever ``current_cycle`` changes.
    break_started(duration_seconds: float)
        Emitted when a work phase hands over to a break.
    activity_suggested(activity: object)
        Emitted when a break activity was suggested for the new break.
    session_logged(data: dict)
        Emitted after the statistics sink accepted a session.  Keys:
        ``duration``, ``break_duration``, ``cycles_completed``,
        ``was_completed``, ``task_label``, ``start_time``, ``end_time``.
    achievement_unlocked(description: str)
        Emitted for each achievement reported after a completed session.
    """

    tick = pyqtSignal(float)
    phase_changed = pyqtSignal(object)
    cycle_changed = pyqtSignal(int)
    break_started = pyqtSignal(float)
    activity_suggested = pyqtSignal(object)
    session_logged = pyqtSignal(object)
    achievement_unlocked = pyqtSignal(str)

    def __init__(
        self,
        settings: Settings,
        parent: QObject | None = None,
        *,
        presets=None,
        statistics=None,
        sounds=None,
        notifications=None,
        journal=None,
        achievements=None,
        break_activities=None,
        tasks=None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings

        # ── collaborators ─────────────────────────────────────────────
        self.presets = _or_null(presets, NullPresets)
        self.statistics = _or_null(statistics, NullStatistics)
        self.sounds = _or_null(sounds, NullSounds)
        self.notifications = _or_null(notifications, NullNotifications)
        self.journal = _or_null(journal, NullJournal)
        self.achievements = _or_null(achievements, NullAchievements)
        self.break_activities = _or_null(break_activities, NullBreakActivities)
        self.tasks = _or_null(tasks, NullTasks)

        # ── phase state ───────────────────────────────────────────────
        self._is_running: bool = False
        self._is_break: bool = False
        self._current_cycle: int = 0
        self._remaining: float = float(settings.work_duration)
        self._phase_duration: float = self._remaining
        self._task_label: str | None = None
        self._suggested_activity = None

        # ── session bookkeeping ───────────────────────────────────────
        self._session_start: datetime | None = None
        self._total_work_time: float = 0.0
        self._cycles_completed: int = 0

        # ── Qt timer ──────────────────────────────────────────────────
        # Not parented to any window, so it keeps firing while the UI
        # is hidden.
        self._qt_timer = QTimer(self)
        self._qt_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def phase(self) -> TimerPhase:
        if not self._is_running:
            return TimerPhase.IDLE
        return TimerPhase.ON_BREAK if self._is_break else TimerPhase.WORKING

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_break_time(self) -> bool:
        return self._is_break

    @property
    def remaining_time(self) -> float:
        """Seconds left in the current phase."""
        return self._remaining

    @property
    def current_cycle(self) -> int:
        """Work phases finished so far in this session."""
        return self._current_cycle

    @property
    def session_start_time(self) -> datetime | None:
        return self._session_start

    @property
    def total_work_time(self) -> float:
        """Work seconds accumulated by completed work phases this session."""
        return self._total_work_time

    @property
    def cycles_completed_in_session(self) -> int:
        return self._cycles_completed

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        if self._phase_duration <= 0:
            return 0.0
        elapsed = self._phase_duration - self._remaining
        return max(0.0, min(1.0, elapsed / self._phase_duration))

    @property
    def suggested_activity(self):
        """Break activity proposed for the running break, if any."""
        return self._suggested_activity

    @property
    def task_label(self) -> str | None:
        """Label stored with logged sessions.

        Falls back to the current task's title when no explicit label
        was set.
        """
        if self._task_label:
            return self._task_label
        task = self.tasks.current_task
        return task.title if task is not None else None

    @task_label.setter
    def task_label(self, value: str | None) -> None:
        self._task_label = value or None

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start (or resume) counting down.  No-op while running."""
        if self._is_running:
            return

        if self._remaining <= 0:
            self._remaining = float(self._settings.work_duration)
            self._phase_duration = self._remaining

        if self._session_start is None:
            self._session_start = datetime.now()

        self._is_running = True
        self._qt_timer.start()
        logger.info("Timer started (%s, %.0fs left)", self.phase.value, self._remaining)
        self.phase_changed.emit(self.phase)

    def stop(self) -> None:
        """Stop the timer and end the session.  Always safe to call.

        Stopping during a work phase logs the session as incomplete.
        """
        self._qt_timer.stop()
        self._is_running = False

        if not self._is_break and self._session_start is not None:
            self._log_session(was_completed=False)

        if self._is_break:
            self._is_break = False
            self._suggested_activity = None
            self._remaining = float(self._settings.work_duration)
            self._phase_duration = self._remaining

        self._clear_session()
        if self._current_cycle != 0:
            self._current_cycle = 0
            self.cycle_changed.emit(0)

        logger.info("Timer stopped")
        self.phase_changed.emit(TimerPhase.IDLE)

    def skip_break_start_work(self) -> None:
        """End the running break early and go straight into work.

        No-op unless a break is running.
        """
        if not self._is_break:
            return

        self._is_break = False
        self._suggested_activity = None
        self._remaining = float(self._settings.work_duration)
        self._phase_duration = self._remaining
        logger.info("Break skipped")

        if not self._qt_timer.isActive():
            self._is_running = False
            self.start()
        else:
            self.phase_changed.emit(self.phase)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if not self._is_running:
            return

        if self._remaining > 0:
            self._remaining = max(0.0, self._remaining - 1)
            self.tick.emit(self._remaining)
        else:
            self._on_phase_complete()

    def _on_phase_complete(self) -> None:
        if self._is_break:
            self._finish_break()
        elif self._current_cycle + 1 < self._settings.max_cycles:
            self._begin_break()
        else:
            self._complete_session()

    def _begin_break(self) -> None:
        settings = self._settings

        self._total_work_time += settings.work_duration
        self._cycles_completed += 1
        self._current_cycle += 1

        duration = select_break_duration(
            self._current_cycle,
            self.presets.current_preset,
            settings.max_cycles,
            settings.break_duration,
        )
        self._is_break = True
        self._remaining = float(duration)
        self._phase_duration = self._remaining
        logger.info(
            "Work phase %d/%d done; %.0fs break",
            self._current_cycle, settings.max_cycles, duration,
        )
        self.cycle_changed.emit(self._current_cycle)
        self.phase_changed.emit(TimerPhase.ON_BREAK)

        if settings.break_notifications:
            self._dispatch("break notification", self.notifications.notify_break_time, duration)
        self._dispatch("work-complete sound", self.sounds.play_work_complete_sound)
        self._credit_current_task()

        if settings.show_break_activities:
            activity = self._dispatch(
                "break activity", self.break_activities.suggest_activity, duration,
            )
            if activity is not None:
                self._suggested_activity = activity
                self.activity_suggested.emit(activity)

        self.break_started.emit(float(duration))

    def _finish_break(self) -> None:
        settings = self._settings

        self._is_break = False
        self._suggested_activity = None
        self._remaining = float(settings.work_duration)
        self._phase_duration = self._remaining
        logger.info("Break over; back to work")
        self.phase_changed.emit(TimerPhase.WORKING)

        if settings.break_notifications:
            self._dispatch("break-complete notification", self.notifications.notify_break_complete)
        self._dispatch("break-complete sound", self.sounds.play_break_complete_sound)

    def _complete_session(self) -> None:
        settings = self._settings

        self._total_work_time += settings.work_duration
        self._cycles_completed += 1
        self._current_cycle += 1
        duration = self._total_work_time
        cycles = self._cycles_completed
        data = self._session_data(was_completed=True)

        self._qt_timer.stop()
        self._is_running = False
        self._is_break = False
        self._current_cycle = 0
        self._remaining = float(settings.work_duration)
        self._phase_duration = self._remaining
        self._clear_session()
        logger.info("Session complete: %d cycles, %.0fs of work", cycles, duration)
        self.cycle_changed.emit(0)
        self.phase_changed.emit(TimerPhase.IDLE)

        if settings.session_complete_notifications:
            self._dispatch("session notification", self.notifications.notify_session_complete, cycles)
        self._dispatch("session-complete sound", self.sounds.play_session_complete_sound)
        self._credit_current_task()

        self._send_to_statistics(data)
        self._dispatch("journal prompt", self.journal.prompt_for_note, duration, cycles)

        unlocked = self._dispatch("achievement check", self.achievements.check_achievements) or []
        for description in unlocked:
            if settings.achievement_notifications:
                self._dispatch(
                    "achievement notification",
                    self.notifications.notify_achievement,
                    description,
                )
            self.achievement_unlocked.emit(description)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: bookkeeping and dispatch
    # ══════════════════════════════════════════════════════════════════

    def _session_data(self, *, was_completed: bool) -> dict:
        return {
            "duration": self._total_work_time,
            "break_duration": self._settings.break_duration * self._cycles_completed,
            "cycles_completed": self._cycles_completed,
            "was_completed": was_completed,
            "task_label": self.task_label,
            "start_time": self._session_start,
            "end_time": datetime.now(),
        }

    def _log_session(self, *, was_completed: bool) -> None:
        self._send_to_statistics(self._session_data(was_completed=was_completed))

    def _send_to_statistics(self, data: dict) -> None:
        try:
            self.statistics.log_session(
                data["duration"],
                data["break_duration"],
                data["cycles_completed"],
                data["was_completed"],
                data["task_label"],
            )
        except Exception:
            logger.exception("Timer collaborator failed (statistics log)")
            return
        self.session_logged.emit(data)

    def _clear_session(self) -> None:
        self._session_start = None
        self._total_work_time = 0.0
        self._cycles_completed = 0

    def _credit_current_task(self) -> None:
        task = self.tasks.current_task
        if task is not None:
            self._dispatch("task pomodoro", self.tasks.increment_pomodoro, task)

    def _dispatch(self, what: str, func, *args):
        """Call a collaborator; log and swallow its failure."""
        try:
            return func(*args)
        except Exception:
            logger.exception("Timer collaborator failed (%s)", what)
            return None
