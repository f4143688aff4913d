from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CompletionStatus
from .model import Task, TaskCompletion, TaskCompletionStat, TaskInput


class TaskRepository(Protocol):
    def list_all(self) -> Sequence[Task]:
        """Ordered by deadline ascending, with creator name."""

        raise NotImplementedError

    def list_upcoming(self, *, now: datetime, limit: int) -> Sequence[Task]:
        raise NotImplementedError

    def count_active(self, *, now: datetime) -> int:
        raise NotImplementedError

    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def create(self, data: TaskInput, *, created_by: int) -> int:
        raise NotImplementedError

    def update(self, task_id: int, data: TaskInput) -> bool:
        raise NotImplementedError

    def delete(self, task_id: int) -> bool:
        """Delete a task; its completions go with it."""

        raise NotImplementedError

    def completions_for_user(self, user_id: int) -> Sequence[TaskCompletion]:
        raise NotImplementedError

    def upsert_completion(
        self,
        *,
        task_id: int,
        user_id: int,
        status: CompletionStatus,
        completed_at: Optional[datetime],
    ) -> None:
        """Insert or update the completion keyed by (task_id, user_id)."""

        raise NotImplementedError

    def completion_stats(self) -> Sequence[TaskCompletionStat]:
        raise NotImplementedError
