"""Tests for the task list."""

import json
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from focusly.errors import TaskImportError
from focusly.tasks import Priority, Task, TaskFilter, TaskManager, TaskSort, sort_tasks

NOW = datetime(2026, 3, 10, 12, 0)


@pytest.fixture
def tasks():
    return TaskManager(now=lambda: NOW)


def _task(title, **kwargs):
    return Task(title=title, **kwargs)


# ═══════════════════════════════════════════════════════════════════════
#  TASK
# ═══════════════════════════════════════════════════════════════════════


class TestTask:

    def test_progress(self):
        assert _task("a", estimated_pomodoros=4, completed_pomodoros=1).progress == 0.25
        assert _task("a", estimated_pomodoros=0).progress == 0.0

    def test_overdue(self):
        assert _task("a", due_date=NOW - timedelta(hours=1)).is_overdue(NOW)
        assert not _task("a", due_date=NOW + timedelta(hours=1)).is_overdue(NOW)
        assert not _task("a", due_date=NOW - timedelta(hours=1), is_completed=True).is_overdue(NOW)
        assert not _task("a").is_overdue(NOW)

    def test_due_today(self):
        assert _task("a", due_date=NOW.replace(hour=23)).is_due_today(NOW)
        assert not _task("a", due_date=NOW + timedelta(days=1)).is_due_today(NOW)

    def test_due_soon(self):
        assert _task("a", due_date=NOW + timedelta(days=2)).is_due_soon(NOW)
        assert not _task("a", due_date=NOW + timedelta(days=5)).is_due_soon(NOW)


# ═══════════════════════════════════════════════════════════════════════
#  CRUD & CURRENT TASK
# ═══════════════════════════════════════════════════════════════════════


class TestCrud:

    def test_add_inserts_at_top(self, tasks):
        tasks.add_task(_task("first"))
        tasks.add_task(_task("second"))
        assert [t.title for t in tasks.tasks] == ["second", "first"]

    def test_tasks_persist(self, tasks):
        tasks.add_task(_task("kept", priority=Priority.HIGH, tags=("work",), due_date=NOW))
        [loaded] = TaskManager().tasks
        assert loaded.title == "kept"
        assert loaded.priority is Priority.HIGH
        assert loaded.tags == ("work",)
        assert loaded.due_date == NOW

    def test_update(self, tasks):
        task = _task("draft")
        tasks.add_task(task)
        tasks.update_task(replace(task, title="final"))
        assert tasks.get(task.id).title == "final"

    def test_delete_clears_current(self, tasks):
        task = _task("gone")
        tasks.add_task(task)
        tasks.set_current_task(task)
        tasks.delete_task(task)
        assert tasks.tasks == []
        assert tasks.current_task is None

    def test_current_task_tracks_updates(self, tasks):
        task = _task("focus", estimated_pomodoros=3)
        tasks.add_task(task)
        tasks.set_current_task(task)
        tasks.increment_pomodoro(task)
        assert tasks.current_task.completed_pomodoros == 1

    def test_toggle_completion(self, tasks):
        task = _task("toggle")
        tasks.add_task(task)
        done = tasks.toggle_completion(task)
        assert done.is_completed and done.completed_at == NOW
        undone = tasks.toggle_completion(done)
        assert not undone.is_completed and undone.completed_at is None

    def test_increment_completes_at_estimate(self, tasks):
        task = _task("two", estimated_pomodoros=2)
        tasks.add_task(task)
        tasks.increment_pomodoro(task)
        assert not tasks.get(task.id).is_completed
        tasks.increment_pomodoro(task)
        finished = tasks.get(task.id)
        assert finished.is_completed
        assert finished.completed_pomodoros == 2
        assert finished.completed_at == NOW


# ═══════════════════════════════════════════════════════════════════════
#  FILTERS, SORTING, SUGGESTIONS
# ═══════════════════════════════════════════════════════════════════════


class TestFiltering:

    @pytest.fixture
    def populated(self, tasks):
        tasks.add_task(_task("done", is_completed=True))
        tasks.add_task(_task("late", due_date=NOW - timedelta(days=1)))
        tasks.add_task(_task("today", due_date=NOW + timedelta(hours=3), tags=("home",)))
        tasks.add_task(_task("someday", priority=Priority.URGENT))
        return tasks

    def test_filters(self, populated):
        def titles(f, **kw):
            return {t.title for t in populated.filtered_tasks(f, **kw)}

        assert titles(TaskFilter.ALL) == {"done", "late", "today", "someday"}
        assert titles(TaskFilter.ACTIVE) == {"late", "today", "someday"}
        assert titles(TaskFilter.COMPLETED) == {"done"}
        assert titles(TaskFilter.TODAY) == {"today"}
        assert titles(TaskFilter.OVERDUE) == {"late"}
        assert titles(TaskFilter.TAG, tag="home") == {"today"}

    def test_counts(self, populated):
        assert populated.active_task_count == 3
        assert populated.completed_task_count == 1
        assert populated.today_task_count == 1
        assert populated.overdue_task_count == 1

    def test_suggest_overdue_first(self, populated):
        assert populated.suggest_next_task().title == "late"

    def test_tasks_for_today_includes_urgent(self, populated):
        assert [t.title for t in populated.tasks_for_today()] == ["someday", "today"]

    def test_delete_completed(self, populated):
        assert populated.delete_completed_tasks() == 1
        assert populated.completed_task_count == 0

    def test_pomodoro_totals(self, tasks):
        tasks.add_task(_task("a", estimated_pomodoros=3, completed_pomodoros=1))
        tasks.add_task(_task("b", estimated_pomodoros=2, completed_pomodoros=2, is_completed=True))
        assert tasks.total_estimated_pomodoros == 3
        assert tasks.total_completed_pomodoros == 3

    def test_suggest_in_progress_before_priority(self, tasks):
        tasks.add_task(_task("urgent", priority=Priority.URGENT))
        tasks.add_task(_task("started", estimated_pomodoros=3, completed_pomodoros=1))
        assert tasks.suggest_next_task().title == "started"

    def test_suggest_none_when_empty(self, tasks):
        assert tasks.suggest_next_task() is None

    def test_tags(self, tasks):
        tasks.add_task(_task("a", tags=("work", "deep")))
        tasks.add_task(_task("b", tags=("work",)))
        assert tasks.all_tags == ["deep", "work"]
        assert len(tasks.tasks_with_tag("work")) == 2


class TestSorting:

    def test_sort_by_priority(self):
        low, high = _task("low", priority=Priority.LOW), _task("high", priority=Priority.HIGH)
        assert sort_tasks([low, high], TaskSort.PRIORITY) == [high, low]

    def test_sort_by_due_date_none_last(self):
        none = _task("none")
        soon = _task("soon", due_date=NOW)
        later = _task("later", due_date=NOW + timedelta(days=1))
        assert sort_tasks([none, later, soon], TaskSort.DUE_DATE) == [soon, later, none]

    def test_sort_by_title_ignores_case(self):
        b, a = _task("beta"), _task("Alpha")
        assert sort_tasks([b, a], TaskSort.TITLE) == [a, b]

    def test_sort_by_created_newest_first(self):
        old = _task("old", created_at=NOW - timedelta(days=1))
        new = _task("new", created_at=NOW)
        assert sort_tasks([old, new], TaskSort.CREATED) == [new, old]


# ═══════════════════════════════════════════════════════════════════════
#  IMPORT / EXPORT
# ═══════════════════════════════════════════════════════════════════════


class TestImportExport:

    def test_export_json(self, tasks):
        tasks.add_task(_task("exported", due_date=NOW, tags=("x",)))
        [item] = json.loads(tasks.export_json())
        assert item["title"] == "exported"
        assert item["due_date"] == NOW.isoformat()
        assert item["tags"] == ["x"]

    def test_import_into_fresh_list(self, tasks):
        source = TaskManager(now=lambda: NOW)
        source.add_task(_task("moved", priority=Priority.URGENT))
        payload = source.export_json()
        source.delete_task(source.tasks[0])

        imported = tasks.import_json(payload)
        assert [t.title for t in imported] == ["moved"]
        assert tasks.tasks[0].priority is Priority.URGENT

    def test_import_duplicate_ids_are_renamed(self, tasks):
        tasks.add_task(_task("original"))
        imported = tasks.import_json(tasks.export_json())
        assert len(tasks.tasks) == 2
        assert imported[0].id != tasks.tasks[0].id

    @pytest.mark.parametrize("payload", ["not json", '[{"no_title": 1}]', "[1, 2]"])
    def test_import_bad_payload(self, tasks, payload):
        with pytest.raises(TaskImportError):
            tasks.import_json(payload)
