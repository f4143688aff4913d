from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_non_empty
from ..core.constants import DUE_SOON_DAYS, TASK_STATS_TOP, UPCOMING_TASKS_LIMIT
from ..core.enums import CompletionStatus, NotificationType, TaskFilter, TaskState
from ..core.exceptions import AuthorizationError, NotFoundError
from ..core.permissions import can_manage_task, can_mark_task_complete, can_view_task_stats
from ..notifications.service import NotificationService
from ..users.model import SessionUser
from ..users.repository import UserRepository
from ..users.service import refresh_actor
from .model import Task, TaskCompletion, TaskInput
from .repository import TaskRepository

_SECONDS_PER_DAY = 24 * 60 * 60


def days_until(deadline: datetime, now: datetime) -> int:
    return math.ceil((deadline - now).total_seconds() / _SECONDS_PER_DAY)


def days_until_label(deadline: datetime, now: datetime) -> str:
    diff = days_until(deadline, now)
    if diff == 0:
        return "Hari ini"
    if diff == 1:
        return "Besok"
    if diff < 0:
        return "Terlambat"
    return f"{diff} hari lagi"


def task_state(task: Task, completion: Optional[TaskCompletion], now: datetime) -> TaskState:
    if completion and completion.is_completed:
        return TaskState.COMPLETED
    if task.deadline < now:
        return TaskState.OVERDUE
    if 0 <= days_until(task.deadline, now) <= DUE_SOON_DAYS:
        return TaskState.DUE_SOON
    return TaskState.UPCOMING


def matches_filter(state: TaskState, task_filter: TaskFilter) -> bool:
    if task_filter == TaskFilter.COMPLETED:
        return state == TaskState.COMPLETED
    if task_filter == TaskFilter.PENDING:
        return state in {TaskState.DUE_SOON, TaskState.UPCOMING}
    if task_filter == TaskFilter.OVERDUE:
        return state == TaskState.OVERDUE
    return True


class TaskService:
    def __init__(self, tasks: TaskRepository, users: UserRepository, notifications: NotificationService):
        self._tasks = tasks
        self._users = users
        self._notifications = notifications

    @staticmethod
    def build_input(*, course_name: str, deadline: str, description: str) -> TaskInput:
        return TaskInput(
            course_name=require_non_empty(course_name, "Mata kuliah"),
            deadline=parse_iso_datetime(deadline),
            description=require_non_empty(description, "Deskripsi"),
        )

    def _require_manager(self, actor: SessionUser) -> SessionUser:
        actor = refresh_actor(self._users, actor)
        if not can_manage_task(actor.role):
            raise AuthorizationError("Anda tidak memiliki akses untuk mengelola tugas")
        return actor

    def list_for(self, actor: SessionUser, *, now: datetime, task_filter: TaskFilter = TaskFilter.ALL) -> dict:
        tasks = list(self._tasks.list_all())
        completions: dict[int, TaskCompletion] = {}
        if can_mark_task_complete(actor.role):
            completions = {c.task_id: c for c in self._tasks.completions_for_user(actor.user_id)}

        rows = []
        counts = {state: 0 for state in TaskState}
        for t in tasks:
            c = completions.get(t.task_id)
            state = task_state(t, c, now)
            counts[state] += 1
            if matches_filter(state, task_filter):
                rows.append(self._to_row(t, c, state, now))

        out = {"items": rows, "filter": task_filter.value}
        if can_mark_task_complete(actor.role):
            out["personal_stats"] = {
                "total": len(tasks),
                "completed": counts[TaskState.COMPLETED],
                "overdue": counts[TaskState.OVERDUE],
                "pending": counts[TaskState.DUE_SOON] + counts[TaskState.UPCOMING],
            }
        if can_view_task_stats(actor.role):
            out["completion_stats"] = {str(s.task_id): s.to_dict() for s in self._tasks.completion_stats()}
        return out

    @staticmethod
    def _to_row(t: Task, c: Optional[TaskCompletion], state: TaskState, now: datetime) -> dict:
        return {
            "id": t.task_id,
            "course_name": t.course_name,
            "deadline": t.deadline.isoformat(),
            "description": t.description,
            "creator_name": t.creator_name,
            "state": state.value,
            "due_label": days_until_label(t.deadline, now),
            "is_completed": state == TaskState.COMPLETED,
            "completed_at": c.completed_at.isoformat() if c and c.completed_at else None,
        }

    def toggle_completion(self, actor: SessionUser, task_id: int, *, now: datetime) -> TaskCompletion:
        actor = refresh_actor(self._users, actor)
        if not can_mark_task_complete(actor.role):
            raise AuthorizationError("Anda tidak dapat menandai tugas")
        if not self._tasks.get_by_id(int(task_id)):
            raise NotFoundError("Tugas tidak ditemukan")

        current = next((c for c in self._tasks.completions_for_user(actor.user_id) if c.task_id == int(task_id)), None)
        if current and current.is_completed:
            new = TaskCompletion(task_id=int(task_id), user_id=actor.user_id, status=CompletionStatus.PENDING)
        else:
            new = TaskCompletion(
                task_id=int(task_id),
                user_id=actor.user_id,
                status=CompletionStatus.COMPLETED,
                completed_at=now,
            )

        self._tasks.upsert_completion(
            task_id=new.task_id,
            user_id=new.user_id,
            status=new.status,
            completed_at=new.completed_at,
        )
        return new

    def create(self, actor: SessionUser, data: TaskInput) -> int:
        actor = self._require_manager(actor)
        task_id = self._tasks.create(data, created_by=actor.user_id)

        self._notifications.notify_many(
            [u.user_id for u in self._users.list_all()],
            title="Tugas Baru",
            message=f"Tugas baru untuk {data.course_name}: {data.description}",
            type=NotificationType.TASK,
        )
        return task_id

    def update(self, actor: SessionUser, task_id: int, data: TaskInput) -> None:
        self._require_manager(actor)
        if not self._tasks.get_by_id(int(task_id)):
            raise NotFoundError("Tugas tidak ditemukan")
        self._tasks.update(int(task_id), data)

    def delete(self, actor: SessionUser, task_id: int) -> None:
        self._require_manager(actor)
        if not self._tasks.delete(int(task_id)):
            raise NotFoundError("Tugas tidak ditemukan")

    def overall_stats(self, actor: SessionUser) -> dict:
        actor = refresh_actor(self._users, actor)
        if not can_view_task_stats(actor.role):
            raise AuthorizationError("Anda tidak memiliki akses ke statistik tugas")

        total_tasks = len(self._tasks.list_all())
        stats = list(self._tasks.completion_stats())
        rates = [s.completion_percentage for s in stats]
        if total_tasks == 0 or not rates:
            summary = {"total_tasks": total_tasks, "avg_completion": 0, "highest_completion": 0, "lowest_completion": 0}
        else:
            summary = {
                "total_tasks": total_tasks,
                "avg_completion": round(sum(rates) / len(rates), 2),
                "highest_completion": max(rates),
                "lowest_completion": min(rates),
            }

        lowest = sorted(stats, key=lambda s: s.completion_percentage)[:TASK_STATS_TOP]
        return {"summary": summary, "tasks": [s.to_dict() for s in lowest]}

    def upcoming(self, *, now: datetime, limit: int = UPCOMING_TASKS_LIMIT) -> list[Task]:
        return list(self._tasks.list_upcoming(now=now, limit=limit))

    def count_active(self, *, now: datetime) -> int:
        return self._tasks.count_active(now=now)
