"""Database package."""

from .db import get_session, init_db, configure_engine, dispose_engine, get_engine
from .models import (
    FocusSession,
    SessionNoteRecord,
    TaskRecord,
    PresetRecord,
    BreakActivityRecord,
    ActivityCompletion,
    Achievement,
)

__all__ = [
    "get_session",
    "init_db",
    "configure_engine",
    "dispose_engine",
    "get_engine",
    "FocusSession",
    "SessionNoteRecord",
    "TaskRecord",
    "PresetRecord",
    "BreakActivityRecord",
    "ActivityCompletion",
    "Achievement",
]
