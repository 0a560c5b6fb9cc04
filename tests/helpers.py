"""Shared test helpers for Focusly."""

from focusly.timer.engine import TimerManager


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def finish_phase(timer: TimerManager) -> None:
    """Jump to the end of the running phase and let the next tick land."""
    timer._remaining = 0
    timer._on_tick()


def finish_work_phases(timer: TimerManager, count: int) -> None:
    """Finish *count* work phases, finishing the break after each one."""
    for _ in range(count):
        finish_phase(timer)
        if timer.is_break_time:
            finish_phase(timer)


# ── recording collaborators ───────────────────────────────────────────────


class _Recorder:
    def __init__(self, log: list):
        self.log = log

    def _record(self, name, *args):
        self.log.append((name, args))

    def calls(self, name):
        return [args for n, args in self.log if n == name]


class RecordingStatistics(_Recorder):
    def log_session(self, duration, break_duration, cycles_completed,
                    was_completed, task_label=None):
        self._record("log_session", duration, break_duration,
                     cycles_completed, was_completed, task_label)


class RecordingSounds(_Recorder):
    def play_work_complete_sound(self):
        self._record("play_work_complete_sound")

    def play_break_complete_sound(self):
        self._record("play_break_complete_sound")

    def play_session_complete_sound(self):
        self._record("play_session_complete_sound")


class RecordingNotifications(_Recorder):
    def notify_break_time(self, duration):
        self._record("notify_break_time", duration)

    def notify_break_complete(self):
        self._record("notify_break_complete")

    def notify_session_complete(self, cycles):
        self._record("notify_session_complete", cycles)

    def notify_achievement(self, description):
        self._record("notify_achievement", description)


class RecordingJournal(_Recorder):
    def prompt_for_note(self, duration, cycles):
        self._record("prompt_for_note", duration, cycles)


class RecordingAchievements(_Recorder):
    def __init__(self, log: list, unlocked=None):
        super().__init__(log)
        self.unlocked = list(unlocked or [])

    def check_achievements(self):
        self._record("check_achievements")
        return self.unlocked


class ExplodingSounds:
    def play_work_complete_sound(self):
        raise RuntimeError("audio device gone")

    play_break_complete_sound = play_work_complete_sound
    play_session_complete_sound = play_work_complete_sound


class ExplodingStatistics:
    def log_session(self, duration, break_duration, cycles_completed,
                    was_completed, task_label=None):
        raise RuntimeError("database is locked")
