"""SQLAlchemy ORM models for Focusly."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Text, JSON
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FocusSession(Base):
    """One logged focus session (from first start to stop or completion)."""

    __tablename__ = "focus_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime, nullable=False, default=datetime.now)
    duration = Column(Float, nullable=False, default=0.0)          # seconds of work
    break_duration = Column(Float, nullable=False, default=0.0)
    cycles_completed = Column(Integer, nullable=False, default=0)
    was_completed = Column(Boolean, nullable=False, default=False)
    task_label = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<FocusSession id={self.id} cycles={self.cycles_completed} "
            f"completed={self.was_completed}>"
        )


class SessionNoteRecord(Base):
    """Journal entry written after a completed session."""

    __tablename__ = "session_notes"

    id = Column(String(32), primary_key=True)
    date = Column(DateTime, nullable=False, default=datetime.now)
    session_duration = Column(Float, nullable=False, default=0.0)
    cycles_completed = Column(Integer, nullable=False, default=0)
    note = Column(Text, nullable=False, default="")
    mood = Column(String(16), nullable=True)        # great | good | okay | tired | frustrated
    tags = Column(JSON, nullable=False, default=list)
    task_completed = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<SessionNoteRecord id={self.id} mood={self.mood}>"


class TaskRecord(Base):
    """A to-do item that focus sessions can be credited to."""

    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True)
    title = Column(String(255), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    priority = Column(Integer, nullable=False, default=1)    # 0 low .. 3 urgent
    estimated_pomodoros = Column(Integer, nullable=False, default=1)
    completed_pomodoros = Column(Integer, nullable=False, default=0)
    due_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    completed_at = Column(DateTime, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    position = Column(Integer, nullable=False, default=0)    # newest first

    def __repr__(self) -> str:
        return f"<TaskRecord id={self.id} title={self.title!r} done={self.is_completed}>"


class PresetRecord(Base):
    """User-defined timer preset (built-ins live in code)."""

    __tablename__ = "presets"

    id = Column(String(32), primary_key=True)
    name = Column(String(64), nullable=False)
    work_duration = Column(Float, nullable=False)
    break_duration = Column(Float, nullable=False)
    long_break_duration = Column(Float, nullable=True)
    max_cycles = Column(Integer, nullable=False, default=4)
    icon = Column(String(64), nullable=False, default="timer")
    color = Column(String(32), nullable=False, default="blue")
    position = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<PresetRecord id={self.id} name={self.name!r}>"


class BreakActivityRecord(Base):
    """User-defined break activity (built-ins live in code)."""

    __tablename__ = "break_activities"

    id = Column(String(36), primary_key=True)
    title = Column(String(128), nullable=False)
    description = Column(Text, nullable=False, default="")
    duration = Column(Integer, nullable=False, default=5)    # minutes
    category = Column(String(16), nullable=False)
    icon = Column(String(64), nullable=False, default="sparkles")
    position = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<BreakActivityRecord id={self.id} title={self.title!r}>"


class ActivityCompletion(Base):
    """How often each break activity (built-in or custom) was done."""

    __tablename__ = "activity_completions"

    activity_id = Column(String(36), primary_key=True)
    count = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<ActivityCompletion activity={self.activity_id} count={self.count}>"


class Achievement(Base):
    """Achievements already announced to the user."""

    __tablename__ = "achievements"

    key = Column(String(64), primary_key=True)
    unlocked_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return f"<Achievement key={self.key} at={self.unlocked_at}>"
