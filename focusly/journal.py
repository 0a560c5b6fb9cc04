"""Post-session journal.

When a full session completes the timer calls :meth:`SessionJournal.prompt_for_note`.
The journal remembers the pending session and emits ``prompt_requested``;
the UI then either saves a note (:meth:`save_session_note`) or dismisses
the prompt (:meth:`skip_note`).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from .database.db import get_session
from .database.models import SessionNoteRecord

logger = logging.getLogger(__name__)


class Mood(Enum):
    GREAT = "great"
    GOOD = "good"
    OKAY = "okay"
    TIRED = "tired"
    FRUSTRATED = "frustrated"

    @property
    def emoji(self) -> str:
        return _MOOD_EMOJI[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def score(self) -> int:
        return _MOOD_SCORES[self]

    @classmethod
    def parse(cls, raw: str) -> Mood:
        """Accept an emoji or a word ("great", "ok", "Tired", ...)."""
        for mood, emoji in _MOOD_EMOJI.items():
            if raw == emoji:
                return mood
        word = raw.strip().lower()
        if word == "ok":
            word = "okay"
        try:
            return cls(word)
        except ValueError:
            raise ValueError(f"Unrecognized mood value: {raw!r}") from None


_MOOD_EMOJI: dict[Mood, str] = {
    Mood.GREAT: "\U0001F60A",
    Mood.GOOD: "\U0001F642",
    Mood.OKAY: "\U0001F610",
    Mood.TIRED: "\U0001F634",
    Mood.FRUSTRATED: "\U0001F624",
}

_MOOD_SCORES: dict[Mood, int] = {
    Mood.GREAT: 5,
    Mood.GOOD: 4,
    Mood.OKAY: 3,
    Mood.TIRED: 2,
    Mood.FRUSTRATED: 1,
}


@dataclass(frozen=True)
class SessionNote:
    session_duration: float
    cycles_completed: int
    note: str = ""
    mood: Mood | None = None
    tags: tuple[str, ...] = ()
    task_completed: str | None = None
    date: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class PendingSession:
    duration: float
    cycles: int


class SessionJournal(QObject):
    """Stores session notes and drives the post-session prompt.

    Signals
    -------
    prompt_requested(duration_seconds: float, cycles: int)
        Emitted when a completed session should be journaled.
    notes_changed()
        Emitted after any note was added, edited, or deleted.
    """

    prompt_requested = pyqtSignal(float, int)
    notes_changed = pyqtSignal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._notes: list[SessionNote] = self._load_notes()
        self._pending: PendingSession | None = None

    # ── prompt flow ───────────────────────────────────────────────────

    @property
    def pending_session(self) -> PendingSession | None:
        return self._pending

    @property
    def show_journal_prompt(self) -> bool:
        return self._pending is not None

    def prompt_for_note(self, duration: float, cycles: int) -> None:
        self._pending = PendingSession(duration, cycles)
        self.prompt_requested.emit(float(duration), int(cycles))

    def skip_note(self) -> None:
        self._pending = None

    def save_session_note(
        self,
        note: str,
        mood: Mood | None = None,
        tags: list[str] | tuple[str, ...] = (),
        task_completed: str | None = None,
    ) -> SessionNote | None:
        """Turn the pending session into a note.  No-op without one."""
        if self._pending is None:
            return None
        entry = SessionNote(
            session_duration=self._pending.duration,
            cycles_completed=self._pending.cycles,
            note=note,
            mood=mood,
            tags=tuple(tags),
            task_completed=task_completed,
        )
        self.add_note(entry)
        self._pending = None
        return entry

    # ── note management ───────────────────────────────────────────────

    @property
    def notes(self) -> list[SessionNote]:
        """All notes, most recent first."""
        return list(self._notes)

    def add_note(self, note: SessionNote) -> None:
        self._notes.insert(0, note)
        with get_session() as db:
            db.add(_to_record(note))
        self.notes_changed.emit()

    def update_note(self, note: SessionNote) -> None:
        for index, existing in enumerate(self._notes):
            if existing.id == note.id:
                self._notes[index] = note
                with get_session() as db:
                    db.merge(_to_record(note))
                self.notes_changed.emit()
                return

    def delete_note(self, note: SessionNote) -> None:
        self._notes = [n for n in self._notes if n.id != note.id]
        with get_session() as db:
            db.query(SessionNoteRecord).filter_by(id=note.id).delete()
        self.notes_changed.emit()

    # ── queries ───────────────────────────────────────────────────────

    def notes_for_date(self, day: date) -> list[SessionNote]:
        return [n for n in self._notes if n.date.date() == day]

    def notes_for_week(self, now: datetime | None = None) -> list[SessionNote]:
        week_ago = (now or datetime.now()) - timedelta(days=7)
        return [n for n in self._notes if n.date >= week_ago]

    def notes_with_mood(self, mood: Mood) -> list[SessionNote]:
        return [n for n in self._notes if n.mood is mood]

    def notes_with_tag(self, tag: str) -> list[SessionNote]:
        return [n for n in self._notes if tag in n.tags]

    @property
    def all_tags(self) -> list[str]:
        return sorted({tag for n in self._notes for tag in n.tags})

    @property
    def average_mood(self) -> Mood | None:
        moods = [n.mood for n in self._notes if n.mood is not None]
        if not moods:
            return None
        average = sum(m.score for m in moods) / len(moods)
        if average >= 4.5:
            return Mood.GREAT
        if average >= 3.5:
            return Mood.GOOD
        if average >= 2.5:
            return Mood.OKAY
        if average >= 1.5:
            return Mood.TIRED
        return Mood.FRUSTRATED

    # ── export ────────────────────────────────────────────────────────

    def export_markdown(self) -> str:
        lines = ["# Focus Session Journal", ""]
        for n in self._notes:
            lines += [f"## {n.date.strftime('%B %d, %Y at %H:%M')}", ""]
            if n.mood is not None:
                lines += [f"**Mood:** {n.mood.emoji} {n.mood.label}", ""]
            lines.append(f"**Duration:** {int(n.session_duration // 60)} minutes")
            lines += [f"**Cycles:** {n.cycles_completed}", ""]
            if n.task_completed:
                lines += [f"**Task:** {n.task_completed}", ""]
            if n.tags:
                lines += [f"**Tags:** {', '.join(n.tags)}", ""]
            lines += ["**Notes:**", n.note, "", "---", ""]
        return "\n".join(lines)

    # ── persistence ───────────────────────────────────────────────────

    @staticmethod
    def _load_notes() -> list[SessionNote]:
        with get_session() as db:
            rows = db.query(SessionNoteRecord).order_by(SessionNoteRecord.date.desc()).all()
            notes = []
            for row in rows:
                mood = None
                if row.mood:
                    try:
                        mood = Mood.parse(row.mood)
                    except ValueError:
                        logger.warning("Dropping unknown mood %r on note %s", row.mood, row.id)
                notes.append(SessionNote(
                    id=row.id,
                    date=row.date,
                    session_duration=row.session_duration,
                    cycles_completed=row.cycles_completed,
                    note=row.note,
                    mood=mood,
                    tags=tuple(row.tags or ()),
                    task_completed=row.task_completed,
                ))
            return notes


def _to_record(note: SessionNote) -> SessionNoteRecord:
    return SessionNoteRecord(
        id=note.id,
        date=note.date,
        session_duration=note.session_duration,
        cycles_completed=note.cycles_completed,
        note=note.note,
        mood=note.mood.value if note.mood else None,
        tags=list(note.tags),
        task_completed=note.task_completed,
    )


def edit_note(entry: SessionNote, /, **changes) -> SessionNote:
    """Return a copy of *entry* with *changes* applied (for ``update_note``)."""
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"])
    return replace(entry, **changes)
