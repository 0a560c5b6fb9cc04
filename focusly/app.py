"""Menu-bar application shell for Focusly."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from PyQt6.QtCore import QObject, Qt, QTimer
from PyQt6.QtGui import QColor, QIcon, QImage, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from .audio.sounds import SoundManager
from .breaks.activities import BreakActivityManager
from .database.db import dispose_engine
from .gamification.achievements import AchievementManager
from .journal import SessionJournal
from .notifications import NotificationManager
from .scheduling import FocusScheduler
from .settings import SettingsStore, load_settings
from .stats.statistics import StatisticsManager
from .tasks import DUE_SOON_WINDOW, TaskManager
from .timer.engine import TimerManager, TimerPhase
from .timer.presets import PresetManager

logger = logging.getLogger(__name__)

REMINDER_CHECK_MS = 60 * 1000
DAILY_SUMMARY_AT = time(20, 0)
OVERDUE_CHECK_AT = time(9, 0)
WEEKLY_SUMMARY_WEEKDAY = 6  # Sunday

_SOUND_FIELDS = {
    "sound_enabled", "sound_volume",
    "work_complete_sound", "break_complete_sound", "session_complete_sound",
}


# ── tray-icon image generation ────────────────────────────────────────────


def _make_tray_icon(phase: TimerPhase) -> QIcon:
    """Generate a monochrome template icon for the macOS menu bar.

    - IDLE:      thin circle outline
    - WORKING:   filled circle
    - ON_BREAK:  circle outline with a centre dot
    """
    size = 64  # 2x for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if phase is TimerPhase.WORKING:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        if phase is TimerPhase.ON_BREAK:
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(colour)
            dot_r = 6
            p.drawEllipse(cx - dot_r, cy - dot_r, dot_r * 2, dot_r * 2)
    p.end()

    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


def _fmt_time(seconds: float) -> str:
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m}:{s:02d}"


def tooltip_for(timer: TimerManager) -> str:
    phase = timer.phase
    if phase is TimerPhase.IDLE:
        return "Focusly - Ready"
    label = "Break" if phase is TimerPhase.ON_BREAK else "Focus"
    return f"Focusly - {label} {_fmt_time(timer.remaining_time)}"


# ══════════════════════════════════════════════════════════════════════════
#  REMINDERS
# ══════════════════════════════════════════════════════════════════════════


class ReminderWatcher(QObject):
    """Posts calendar, task and summary reminders at most once each.

    ``check()`` runs every minute from the app; tests call it directly
    with a fixed clock.
    """

    def __init__(
        self,
        store: SettingsStore,
        notifications: NotificationManager,
        scheduler: FocusScheduler,
        tasks: TaskManager,
        statistics: StatisticsManager,
        parent: QObject | None = None,
        *,
        now=datetime.now,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._notifications = notifications
        self._scheduler = scheduler
        self._tasks = tasks
        self._statistics = statistics
        self._now = now
        self._reminded_events: set[str] = set()
        self._reminded_tasks: set[str] = set()
        self._daily_summary_day = None
        self._overdue_day = None
        self._weekly_summary_day = None

        self._timer = QTimer(self)
        self._timer.setInterval(REMINDER_CHECK_MS)
        self._timer.timeout.connect(self.check)

    def start(self) -> None:
        self._timer.start()

    def check(self) -> None:
        settings = self._store.settings
        now = self._now()
        if settings.calendar_reminders:
            self._check_calendar(now, settings.calendar_reminder_minutes)
        if settings.task_due_notifications:
            self._check_due_tasks(now)
        self._forget_finished(now)

        today = now.date()
        if settings.task_overdue_notifications and self._overdue_day != today:
            if now.time() >= OVERDUE_CHECK_AT:
                self._overdue_day = today
                self._notifications.notify_overdue_tasks(self._tasks.overdue_task_count)
        if settings.daily_summary_notifications and self._daily_summary_day != today:
            if now.time() >= DAILY_SUMMARY_AT:
                self._daily_summary_day = today
                self._notifications.notify_daily_summary(self._statistics.daily_stats(today))
        if settings.weekly_summary_notifications and self._weekly_summary_day != today:
            if now.weekday() == WEEKLY_SUMMARY_WEEKDAY and now.time() >= DAILY_SUMMARY_AT:
                self._weekly_summary_day = today
                self._post_weekly_summary()

    # ── checks ────────────────────────────────────────────────────────

    def _check_calendar(self, now: datetime, minutes: int) -> None:
        lead = timedelta(minutes=minutes)
        for event in self._scheduler.upcoming_events:
            if event.is_all_day or event.id in self._reminded_events:
                continue
            starts_in = event.starts_within(now)
            if starts_in is not None and starts_in <= lead:
                self._reminded_events.add(event.id)
                self._notifications.notify_calendar_reminder(event, minutes)

    def _check_due_tasks(self, now: datetime) -> None:
        for task in self._tasks.tasks:
            if task.is_completed or task.due_date is None or task.id in self._reminded_tasks:
                continue
            if now <= task.due_date <= now + DUE_SOON_WINDOW:
                self._reminded_tasks.add(task.id)
                self._notifications.notify_task_due(task)

    def _forget_finished(self, now: datetime) -> None:
        """Drop ids that can never fire again: started events, done or deleted tasks."""
        self._reminded_events &= {
            e.id for e in self._scheduler.upcoming_events if e.starts_within(now) is not None
        }
        self._reminded_tasks &= {t.id for t in self._tasks.tasks if not t.is_completed}

    def _post_weekly_summary(self) -> None:
        week = self._statistics.weekly_stats()
        self._notifications.notify_weekly_summary(
            sum(d.total_focus_time for d in week) / 3600,
            sum(d.sessions_completed for d in week),
            self._statistics.current_streak,
        )


# ══════════════════════════════════════════════════════════════════════════
#  APPLICATION
# ══════════════════════════════════════════════════════════════════════════


class MenuBarApp(QObject):
    """Tray icon plus every collaborator wired into a :class:`TimerManager`."""

    def __init__(
        self,
        store: SettingsStore | None = None,
        parent: QObject | None = None,
        *,
        event_source=None,
    ) -> None:
        super().__init__(parent)
        self.store = store or SettingsStore(load_settings(), self)

        # ── collaborators ─────────────────────────────────────────────
        self.presets = PresetManager(self.store)
        self.statistics = StatisticsManager(self)
        self.sounds = SoundManager(self)
        self.sounds.apply_settings(self.store.settings)
        self.tray_icon = QSystemTrayIcon(self)
        self.notifications = NotificationManager(self, tray_icon=self.tray_icon)
        self.journal = SessionJournal(self)
        self.achievements = AchievementManager(self.statistics)
        self.break_activities = BreakActivityManager()
        self.tasks = TaskManager()
        self.scheduler = FocusScheduler(self, event_source=event_source, auto_refresh=True)

        self.timer = TimerManager(
            self.store.settings,
            self,
            presets=self.presets,
            statistics=self.statistics,
            sounds=self.sounds,
            notifications=self.notifications,
            journal=self.journal,
            achievements=self.achievements,
            break_activities=self.break_activities,
            tasks=self.tasks,
        )
        self.reminders = ReminderWatcher(
            self.store, self.notifications, self.scheduler, self.tasks, self.statistics, self,
        )

        # ── tray ──────────────────────────────────────────────────────
        self.tray_icon.setIcon(_make_tray_icon(TimerPhase.IDLE))
        self.tray_icon.setToolTip(tooltip_for(self.timer))
        self._build_tray_menu()

        # ── wire signals ──────────────────────────────────────────────
        self.timer.phase_changed.connect(self._on_phase_changed)
        self.timer.tick.connect(self._on_tick)
        self.store.changed.connect(self._on_setting_changed)

    def show(self) -> None:
        self.tray_icon.show()
        self.reminders.start()
        logger.info("Focusly is in the menu bar")

    # ── tray menu ─────────────────────────────────────────────────────

    def _build_tray_menu(self) -> None:
        menu = QMenu()
        self._start_action = menu.addAction("Start Focus")
        self._start_action.triggered.connect(self.timer.start)
        self._stop_action = menu.addAction("Stop")
        self._stop_action.triggered.connect(self.timer.stop)
        self._skip_action = menu.addAction("Skip Break")
        self._skip_action.triggered.connect(self.timer.skip_break_start_work)

        menu.addSeparator()
        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)

        self._menu = menu
        self.tray_icon.setContextMenu(menu)
        self._update_actions(TimerPhase.IDLE)

    def _update_actions(self, phase: TimerPhase) -> None:
        self._start_action.setEnabled(phase is TimerPhase.IDLE)
        self._stop_action.setEnabled(phase is not TimerPhase.IDLE)
        self._skip_action.setEnabled(phase is TimerPhase.ON_BREAK)

    def _quit_app(self) -> None:
        self.timer.stop()
        self.tray_icon.hide()
        dispose_engine()
        QApplication.instance().quit()

    # ── signal handlers ───────────────────────────────────────────────

    def _on_phase_changed(self, phase: TimerPhase) -> None:
        self.tray_icon.setIcon(_make_tray_icon(phase))
        self.tray_icon.setToolTip(tooltip_for(self.timer))
        self._update_actions(phase)

    def _on_tick(self, _remaining: float) -> None:
        self.tray_icon.setToolTip(tooltip_for(self.timer))

    def _on_setting_changed(self, name: str, _value) -> None:
        if name in _SOUND_FIELDS:
            self.sounds.apply_settings(self.store.settings)
