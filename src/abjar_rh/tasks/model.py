from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CompletionStatus


@dataclass(frozen=True)
class Task:
    task_id: int
    course_name: str
    deadline: datetime
    description: str
    created_by: Optional[int] = None
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TaskInput:
    course_name: str
    deadline: datetime
    description: str


@dataclass(frozen=True)
class TaskCompletion:
    task_id: int
    user_id: int
    status: CompletionStatus
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == CompletionStatus.COMPLETED


@dataclass(frozen=True)
class TaskCompletionStat:
    """Read-model: progress of one task across everyone who can complete tasks."""

    task_id: int
    course_name: str
    completed_count: int
    total_users: int

    @property
    def completion_percentage(self) -> float:
        if not self.total_users:
            return 0.0
        return round(self.completed_count * 100 / self.total_users, 2)

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "course_name": self.course_name,
            "completed_count": self.completed_count,
            "total_users": self.total_users,
            "completion_percentage": self.completion_percentage,
        }
