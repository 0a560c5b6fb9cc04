"""Tests for calendar-aware focus scheduling."""

from datetime import datetime, timedelta

import pytest

from focusly.scheduling import CalendarEvent, FocusScheduler

from helpers import SignalCollector

NOW = datetime(2026, 3, 10, 9, 0)


def _event(title, start_offset_min, length_min, **kwargs):
    start = NOW + timedelta(minutes=start_offset_min)
    return CalendarEvent(
        id=title,
        title=title,
        start_date=start,
        end_date=start + timedelta(minutes=length_min),
        **kwargs,
    )


def _scheduler(events):
    return FocusScheduler(event_source=lambda: list(events), now=lambda: NOW)


# ═══════════════════════════════════════════════════════════════════════
#  EVENTS
# ═══════════════════════════════════════════════════════════════════════


class TestCalendarEvent:

    def test_duration(self):
        assert _event("a", 0, 45).duration == timedelta(minutes=45)

    def test_in_progress(self):
        assert _event("a", -10, 30).is_in_progress(NOW)
        assert not _event("a", 10, 30).is_in_progress(NOW)

    def test_starts_within(self):
        assert _event("a", 10, 30).starts_within(NOW) == timedelta(minutes=10)
        assert _event("a", -10, 30).starts_within(NOW) is None


@pytest.mark.usefixtures("qapp")
class TestRefresh:

    def test_events_sorted_on_refresh(self):
        scheduler = _scheduler([_event("late", 120, 30), _event("early", 30, 30)])
        assert [e.title for e in scheduler.upcoming_events] == ["early", "late"]

    def test_refresh_emits(self):
        events = []
        scheduler = _scheduler(events)
        changed = SignalCollector()
        scheduler.events_changed.connect(changed)
        events.append(_event("new", 30, 30))
        scheduler.refresh()
        assert len(changed) == 1
        assert len(scheduler.upcoming_events) == 1

    def test_failing_source_keeps_events(self):
        calls = []

        def source():
            calls.append(1)
            if len(calls) > 1:
                raise RuntimeError("calendar offline")
            return [_event("kept", 30, 30)]

        scheduler = FocusScheduler(event_source=source, now=lambda: NOW)
        scheduler.refresh()
        assert [e.title for e in scheduler.upcoming_events] == ["kept"]

    def test_without_source(self):
        scheduler = FocusScheduler(now=lambda: NOW)
        assert not scheduler.has_access
        assert scheduler.suggest_focus_blocks() == []
        assert scheduler.next_meeting is None

    def test_auto_refresh_timer(self):
        scheduler = FocusScheduler(event_source=list, now=lambda: NOW, auto_refresh=True)
        assert scheduler._refresh_timer.isActive()
        assert scheduler._refresh_timer.interval() == 5 * 60 * 1000
        scheduler._refresh_timer.stop()


# ═══════════════════════════════════════════════════════════════════════
#  SUGGESTIONS
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSuggestions:

    def test_next_meeting_skips_all_day_and_past(self):
        scheduler = _scheduler([
            _event("past", -60, 30),
            _event("holiday", 10, 24 * 60, is_all_day=True),
            _event("standup", 30, 15),
        ])
        assert scheduler.next_meeting.title == "standup"
        assert scheduler.time_until_next_meeting() == timedelta(minutes=30)

    def test_time_until_none_without_meetings(self):
        assert _scheduler([]).time_until_next_meeting() is None

    def test_empty_day_blocks(self):
        blocks = _scheduler([]).suggest_focus_blocks(timedelta(hours=1))
        assert blocks == [NOW + timedelta(hours=h) for h in range(5)]

    def test_blocks_step_around_meeting(self):
        scheduler = _scheduler([_event("sync", 30, 60)])
        blocks = scheduler.suggest_focus_blocks(timedelta(hours=1))
        # 09:00, 09:30 and 10:00 all overlap the 09:30-10:30 meeting.
        assert blocks[0] == NOW + timedelta(minutes=90)

    def test_blocks_stop_at_end_of_day(self):
        late = datetime(2026, 3, 10, 16, 30)
        scheduler = FocusScheduler(event_source=list, now=lambda: late)
        blocks = scheduler.suggest_focus_blocks(timedelta(hours=1))
        assert blocks == [late, late + timedelta(hours=1)]

    @pytest.mark.parametrize("minutes_away, fits", [(60, True), (55, True), (54, False)])
    def test_can_fit_focus_session(self, minutes_away, fits):
        scheduler = _scheduler([_event("review", minutes_away, 30)])
        assert scheduler.can_fit_focus_session(timedelta(minutes=50)) is fits

    def test_can_fit_without_meetings(self):
        assert _scheduler([]).can_fit_focus_session(timedelta(hours=3))


@pytest.mark.usefixtures("qapp")
class TestSmartScheduling:

    def test_pause_when_meeting_imminent(self):
        assert _scheduler([_event("call", 4, 30)]).should_pause_focus()

    def test_pause_during_meeting(self):
        assert _scheduler([_event("call", -10, 30)]).should_pause_focus()

    def test_no_pause_for_distant_meeting(self):
        assert not _scheduler([_event("call", 20, 30)]).should_pause_focus()

    def test_no_pause_for_all_day_event(self):
        assert not _scheduler([_event("offsite", -60, 600, is_all_day=True)]).should_pause_focus()

    def test_next_available_after_back_to_back(self):
        scheduler = _scheduler([
            _event("a", 0, 30),
            _event("b", 40, 30),     # 10 minutes after a: too short a gap
            _event("c", 120, 30),    # 50 minutes after b
        ])
        assert scheduler.next_available_time() == NOW + timedelta(minutes=70)

    def test_next_available_after_last_meeting(self):
        scheduler = _scheduler([_event("a", 10, 30)])
        assert scheduler.next_available_time() == NOW + timedelta(minutes=40)

    def test_next_available_now_when_free(self):
        assert _scheduler([_event("past", -90, 30)]).next_available_time() == NOW
