"""No-op collaborators for :class:`~focusly.timer.engine.TimerManager`.

Every collaborator argument of the timer defaults to one of these, so the
timer can call its sinks unconditionally.  Real implementations only need
the same method names (duck typing); they do not subclass these.
"""

from __future__ import annotations


class NullStatistics:
    def log_session(self, duration, break_duration, cycles_completed,
                    was_completed, task_label=None):
        pass


class NullSounds:
    def play_work_complete_sound(self):
        pass

    def play_break_complete_sound(self):
        pass

    def play_session_complete_sound(self):
        pass


class NullNotifications:
    def notify_break_time(self, duration):
        pass

    def notify_break_complete(self):
        pass

    def notify_session_complete(self, cycles):
        pass

    def notify_achievement(self, description):
        pass


class NullJournal:
    def prompt_for_note(self, duration, cycles):
        pass


class NullAchievements:
    def check_achievements(self):
        return []


class NullPresets:
    """Preset source with no current preset: breaks are never long."""

    current_preset = None


class NullBreakActivities:
    def suggest_activity(self, duration):
        return None


class NullTasks:
    current_task = None

    def increment_pomodoro(self, task):
        pass
