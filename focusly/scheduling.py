"""Calendar-aware focus scheduling.

Events come from an injected *event source*: any callable returning a list
of :class:`CalendarEvent`.  The scheduler refreshes from it every five
minutes and answers questions like "is there room for a 50-minute block
before my next meeting?".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_MS = 5 * 60 * 1000
MEETING_BUFFER = timedelta(minutes=5)
SLOT_STEP = timedelta(minutes=30)
MIN_GAP = timedelta(minutes=30)
END_OF_WORKDAY = time(18, 0)
MAX_SUGGESTIONS = 5


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    title: str
    start_date: datetime
    end_date: datetime
    is_all_day: bool = False
    calendar: str = ""

    @property
    def duration(self) -> timedelta:
        return self.end_date - self.start_date

    def is_in_progress(self, now: datetime) -> bool:
        return self.start_date <= now <= self.end_date

    def starts_within(self, now: datetime) -> timedelta | None:
        """Time until the event starts, or ``None`` if it already has."""
        if self.start_date > now:
            return self.start_date - now
        return None

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return (
            (start <= self.start_date < end)
            or (start < self.end_date <= end)
            or (self.start_date <= start and self.end_date >= end)
        )


class FocusScheduler(QObject):
    """Suggests focus blocks around upcoming calendar events.

    Signals
    -------
    events_changed()
        Emitted after ``refresh`` or ``set_events`` replaced the event list.
    """

    events_changed = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        event_source: Callable[[], list[CalendarEvent]] | None = None,
        now: Callable[[], datetime] = datetime.now,
        auto_refresh: bool = False,
    ) -> None:
        super().__init__(parent)
        self._event_source = event_source
        self._now = now
        self._events: list[CalendarEvent] = []

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(REFRESH_INTERVAL_MS)
        self._refresh_timer.timeout.connect(self.refresh)

        if event_source is not None:
            self.refresh()
            if auto_refresh:
                self._refresh_timer.start()

    # ── events ────────────────────────────────────────────────────────

    @property
    def has_access(self) -> bool:
        return self._event_source is not None

    @property
    def upcoming_events(self) -> list[CalendarEvent]:
        return list(self._events)

    def set_events(self, events: list[CalendarEvent]) -> None:
        self._events = sorted(events, key=lambda e: e.start_date)
        self.events_changed.emit()

    def refresh(self) -> None:
        """Pull events from the event source.  A failing source keeps the old list."""
        if self._event_source is None:
            return
        try:
            events = self._event_source()
        except Exception:
            logger.exception("Calendar event source failed")
            return
        self.set_events(events)

    @property
    def next_meeting(self) -> CalendarEvent | None:
        now = self._now()
        for event in self._events:
            if not event.is_all_day and event.start_date > now:
                return event
        return None

    # ── focus suggestions ─────────────────────────────────────────────

    def suggest_focus_blocks(self, duration: timedelta = timedelta(hours=1)) -> list[datetime]:
        """Conflict-free start times for *duration* blocks before 18:00."""
        if not self.has_access:
            return []

        now = self._now()
        end_of_day = datetime.combine(now.date(), END_OF_WORKDAY)
        timed = [e for e in self._events if not e.is_all_day]

        suggestions: list[datetime] = []
        current = now
        while current < end_of_day and len(suggestions) < MAX_SUGGESTIONS:
            proposed_end = current + duration
            if any(e.overlaps(current, proposed_end) for e in timed):
                current += SLOT_STEP
            else:
                suggestions.append(current)
                current = proposed_end
        return suggestions

    def time_until_next_meeting(self) -> timedelta | None:
        meeting = self.next_meeting
        if meeting is None:
            return None
        return meeting.start_date - self._now()

    def can_fit_focus_session(self, duration: timedelta) -> bool:
        """True if *duration* plus a 5-minute buffer ends before the next meeting."""
        until = self.time_until_next_meeting()
        if until is None:
            return True
        return until >= duration + MEETING_BUFFER

    # ── smart scheduling ──────────────────────────────────────────────

    def should_pause_focus(self) -> bool:
        """A meeting starts within 5 minutes, or one is in progress."""
        now = self._now()
        meeting = self.next_meeting
        if meeting is not None:
            starts_in = meeting.starts_within(now)
            if starts_in is not None and starts_in <= MEETING_BUFFER:
                return True
        return any(not e.is_all_day and e.is_in_progress(now) for e in self._events)

    def next_available_time(self) -> datetime:
        """End of the first meeting followed by at least 30 free minutes."""
        now = self._now()
        for event in self._events:
            if event.end_date <= now:
                continue
            following = next(
                (e for e in self._events if e.start_date >= event.end_date), None,
            )
            if following is None:
                return event.end_date
            if following.start_date - event.end_date >= MIN_GAP:
                return event.end_date
        return now
