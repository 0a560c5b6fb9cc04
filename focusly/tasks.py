"""Task list with pomodoro estimates.

The timer credits the *current task* with one pomodoro per finished work
phase (``increment_pomodoro``) and labels logged sessions with its title.
A task is completed automatically once its estimate is reached.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Callable

from .database.db import get_session
from .database.models import TaskRecord
from .errors import TaskImportError

logger = logging.getLogger(__name__)

# How long before its due date a task reminder fires.
DUE_SOON_WINDOW = timedelta(minutes=30)


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    URGENT = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


class TaskFilter(Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    TODAY = "today"
    OVERDUE = "overdue"
    TAG = "tag"


class TaskSort(Enum):
    PRIORITY = "priority"
    DUE_DATE = "due_date"
    CREATED = "created"
    TITLE = "title"


@dataclass(frozen=True)
class Task:
    title: str
    priority: Priority = Priority.MEDIUM
    estimated_pomodoros: int = 1
    completed_pomodoros: int = 0
    is_completed: bool = False
    due_date: datetime | None = None
    notes: str | None = None
    tags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def progress(self) -> float:
        if self.estimated_pomodoros <= 0:
            return 0.0
        return self.completed_pomodoros / self.estimated_pomodoros

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.due_date is None or self.is_completed:
            return False
        return self.due_date < (now or datetime.now())

    def is_due_today(self, now: datetime | None = None) -> bool:
        if self.due_date is None:
            return False
        return self.due_date.date() == (now or datetime.now()).date()

    def is_due_soon(self, now: datetime | None = None) -> bool:
        """Due within the next three days (and not done)."""
        if self.due_date is None or self.is_completed:
            return False
        days_until = (self.due_date - (now or datetime.now())).days
        return 0 <= days_until <= 3


class TaskManager:
    """Owns the task list and the task currently being focused on."""

    def __init__(self, *, now: Callable[[], datetime] = datetime.now) -> None:
        self._now = now
        self._tasks: list[Task] = self._load_tasks()
        self._current_id: str | None = None

    # ── current task ──────────────────────────────────────────────────

    @property
    def current_task(self) -> Task | None:
        if self._current_id is None:
            return None
        return self.get(self._current_id)

    def set_current_task(self, task: Task | None) -> None:
        self._current_id = task.id if task is not None else None

    # ── CRUD ──────────────────────────────────────────────────────────

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def add_task(self, task: Task) -> None:
        self._tasks.insert(0, task)
        self._save_tasks()

    def update_task(self, task: Task) -> None:
        for index, existing in enumerate(self._tasks):
            if existing.id == task.id:
                self._tasks[index] = task
                self._save_tasks()
                return

    def delete_task(self, task: Task) -> None:
        self._tasks = [t for t in self._tasks if t.id != task.id]
        if self._current_id == task.id:
            self._current_id = None
        self._save_tasks()

    def toggle_completion(self, task: Task) -> Task:
        done = not task.is_completed
        updated = replace(
            task,
            is_completed=done,
            completed_at=self._now() if done else None,
        )
        self.update_task(updated)
        return updated

    def increment_pomodoro(self, task: Task) -> Task:
        """Credit one pomodoro; complete the task when the estimate is met."""
        current = self.get(task.id) or task
        updated = replace(current, completed_pomodoros=current.completed_pomodoros + 1)
        if updated.completed_pomodoros >= updated.estimated_pomodoros and not updated.is_completed:
            updated = replace(updated, is_completed=True, completed_at=self._now())
            logger.info("Task %r reached its estimate", updated.title)
        self.update_task(updated)
        return updated

    # ── filtering & sorting ───────────────────────────────────────────

    def filtered_tasks(
        self,
        task_filter: TaskFilter = TaskFilter.ALL,
        sort: TaskSort = TaskSort.PRIORITY,
        tag: str | None = None,
    ) -> list[Task]:
        now = self._now()
        if task_filter is TaskFilter.ACTIVE:
            tasks = [t for t in self._tasks if not t.is_completed]
        elif task_filter is TaskFilter.COMPLETED:
            tasks = [t for t in self._tasks if t.is_completed]
        elif task_filter is TaskFilter.TODAY:
            tasks = [t for t in self._tasks if t.is_due_today(now) and not t.is_completed]
        elif task_filter is TaskFilter.OVERDUE:
            tasks = [t for t in self._tasks if t.is_overdue(now)]
        elif task_filter is TaskFilter.TAG:
            tasks = [t for t in self._tasks if tag in t.tags]
        else:
            tasks = list(self._tasks)
        return sort_tasks(tasks, sort)

    # ── statistics ────────────────────────────────────────────────────

    @property
    def active_task_count(self) -> int:
        return sum(1 for t in self._tasks if not t.is_completed)

    @property
    def completed_task_count(self) -> int:
        return sum(1 for t in self._tasks if t.is_completed)

    @property
    def today_task_count(self) -> int:
        now = self._now()
        return sum(1 for t in self._tasks if t.is_due_today(now) and not t.is_completed)

    @property
    def overdue_task_count(self) -> int:
        now = self._now()
        return sum(1 for t in self._tasks if t.is_overdue(now))

    @property
    def total_estimated_pomodoros(self) -> int:
        return sum(t.estimated_pomodoros for t in self._tasks if not t.is_completed)

    @property
    def total_completed_pomodoros(self) -> int:
        return sum(t.completed_pomodoros for t in self._tasks)

    # ── suggestions ───────────────────────────────────────────────────

    def suggest_next_task(self) -> Task | None:
        """Overdue first, then due today, then in progress, then priority."""
        now = self._now()
        active = [t for t in self._tasks if not t.is_completed]

        for task in active:
            if task.is_overdue(now):
                return task
        for task in active:
            if task.is_due_today(now):
                return task
        for task in active:
            if 0 < task.completed_pomodoros < task.estimated_pomodoros:
                return task

        ranked = sort_tasks(active, TaskSort.PRIORITY)
        return ranked[0] if ranked else None

    def tasks_for_today(self) -> list[Task]:
        now = self._now()
        return sort_tasks(
            [
                t for t in self._tasks
                if not t.is_completed and (t.is_due_today(now) or t.priority is Priority.URGENT)
            ],
            TaskSort.PRIORITY,
        )

    @property
    def all_tags(self) -> list[str]:
        return sorted({tag for t in self._tasks for tag in t.tags})

    def tasks_with_tag(self, tag: str) -> list[Task]:
        return [t for t in self._tasks if tag in t.tags]

    # ── bulk operations ───────────────────────────────────────────────

    def delete_completed_tasks(self) -> int:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if not t.is_completed]
        current = self.current_task
        if current is None:
            self._current_id = None
        self._save_tasks()
        return before - len(self._tasks)

    def export_json(self) -> str:
        return json.dumps([_task_to_dict(t) for t in self._tasks], indent=2)

    def import_json(self, payload: str) -> list[Task]:
        """Append tasks from an ``export_json`` payload."""
        try:
            items = json.loads(payload)
            imported = [_task_from_dict(item) for item in items]
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise TaskImportError(f"Could not import tasks: {exc}") from exc

        known = {t.id for t in self._tasks}
        imported = [
            t if t.id not in known else replace(t, id=uuid.uuid4().hex)
            for t in imported
        ]
        self._tasks.extend(imported)
        self._save_tasks()
        logger.info("Imported %d tasks", len(imported))
        return imported

    # ── persistence ───────────────────────────────────────────────────

    @staticmethod
    def _load_tasks() -> list[Task]:
        with get_session() as db:
            rows = db.query(TaskRecord).order_by(TaskRecord.position).all()
            return [
                Task(
                    id=row.id,
                    title=row.title,
                    priority=Priority(row.priority),
                    estimated_pomodoros=row.estimated_pomodoros,
                    completed_pomodoros=row.completed_pomodoros,
                    is_completed=row.is_completed,
                    due_date=row.due_date,
                    notes=row.notes,
                    tags=tuple(row.tags or ()),
                    created_at=row.created_at,
                    completed_at=row.completed_at,
                )
                for row in rows
            ]

    def _save_tasks(self) -> None:
        with get_session() as db:
            db.query(TaskRecord).delete()
            for position, task in enumerate(self._tasks):
                db.add(TaskRecord(
                    id=task.id,
                    title=task.title,
                    is_completed=task.is_completed,
                    priority=int(task.priority),
                    estimated_pomodoros=task.estimated_pomodoros,
                    completed_pomodoros=task.completed_pomodoros,
                    due_date=task.due_date,
                    notes=task.notes,
                    created_at=task.created_at,
                    completed_at=task.completed_at,
                    tags=list(task.tags),
                    position=position,
                ))


def sort_tasks(tasks: list[Task], sort: TaskSort) -> list[Task]:
    if sort is TaskSort.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority, reverse=True)
    if sort is TaskSort.DUE_DATE:
        # Tasks without a due date go last.
        return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or datetime.max))
    if sort is TaskSort.CREATED:
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    return sorted(tasks, key=lambda t: t.title.casefold())


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _task_to_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "priority": int(task.priority),
        "estimated_pomodoros": task.estimated_pomodoros,
        "completed_pomodoros": task.completed_pomodoros,
        "is_completed": task.is_completed,
        "due_date": _iso(task.due_date),
        "notes": task.notes,
        "tags": list(task.tags),
        "created_at": _iso(task.created_at),
        "completed_at": _iso(task.completed_at),
    }


def _task_from_dict(item: dict) -> Task:
    return Task(
        id=item.get("id") or uuid.uuid4().hex,
        title=item["title"],
        priority=Priority(item.get("priority", Priority.MEDIUM)),
        estimated_pomodoros=int(item.get("estimated_pomodoros", 1)),
        completed_pomodoros=int(item.get("completed_pomodoros", 0)),
        is_completed=bool(item.get("is_completed", False)),
        due_date=_parse_iso(item.get("due_date")),
        notes=item.get("notes"),
        tags=tuple(item.get("tags", ())),
        created_at=_parse_iso(item.get("created_at")) or datetime.now(),
        completed_at=_parse_iso(item.get("completed_at")),
    )

