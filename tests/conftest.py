from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from abjar_rh.attendance.model import AttendanceRecord, AttendanceRow
from abjar_rh.container import Container, wire_container
from abjar_rh.core.enums import AttendanceStatus, CompletionStatus, Role, Weekday
from abjar_rh.core.exceptions import ConflictError
from abjar_rh.notifications.model import NewNotification, Notification
from abjar_rh.schedules.model import Schedule, ScheduleInput
from abjar_rh.tasks.model import Task, TaskCompletion, TaskCompletionStat, TaskInput
from abjar_rh.users.model import User

REGISTRATION_CODE = "RH25UN1NDR406"


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._ids = itertools.count(1)

    def add(self, full_name: str, npm: str, role: Role, password: str = "Rahasia#123") -> User:
        user = User(
            user_id=next(self._ids),
            full_name=full_name,
            npm=npm,
            password_hash=generate_password_hash(password),
            role=role,
        )
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_npm(self, npm: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.npm == npm), None)

    def create_user(self, *, full_name: str, npm: str, password_hash: str, role: Role) -> int:
        if self.get_by_npm(npm):
            raise ConflictError("Data sudah ada")
        user = User(user_id=next(self._ids), full_name=full_name, npm=npm, password_hash=password_hash, role=role)
        self.users[user.user_id] = user
        return user.user_id

    def update_role(self, user_id: int, role: Role, *, expected_role: Role, max_admins: Optional[int] = None) -> bool:
        user = self.users.get(int(user_id))
        if not user or user.role != expected_role:
            return False
        if max_admins is not None and self.count_by_role()[Role.ADMIN] >= max_admins:
            return False
        self.users[user.user_id] = replace(user, role=role)
        return True

    def list_all(self) -> Sequence[User]:
        return sorted(self.users.values(), key=lambda u: u.user_id, reverse=True)

    def count_by_role(self) -> dict[Role, int]:
        counts = {role: 0 for role in Role}
        for u in self.users.values():
            counts[u.role] += 1
        return counts


class InMemorySchedules:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.schedules: dict[int, Schedule] = {}
        self._ids = itertools.count(1)

    def _order(self, s: Schedule):
        return Weekday.ordered().index(s.day), s.start_time

    def list_all(self) -> Sequence[Schedule]:
        return sorted(self.schedules.values(), key=self._order)

    def list_for_day(self, day: Weekday) -> Sequence[Schedule]:
        return [s for s in self.list_all() if s.day == day]

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        return self.schedules.get(int(schedule_id))

    def create(self, data: ScheduleInput, *, created_by: int) -> int:
        creator = self._users.get_by_id(created_by)
        s = Schedule(
            schedule_id=next(self._ids),
            course_name=data.course_name,
            day=data.day,
            start_time=data.start_time,
            end_time=data.end_time,
            description=data.description,
            created_by=created_by,
            creator_name=creator.full_name if creator else None,
        )
        self.schedules[s.schedule_id] = s
        return s.schedule_id

    def update(self, schedule_id: int, data: ScheduleInput) -> bool:
        s = self.schedules.get(int(schedule_id))
        if not s:
            return False
        self.schedules[s.schedule_id] = replace(
            s,
            course_name=data.course_name,
            day=data.day,
            start_time=data.start_time,
            end_time=data.end_time,
            description=data.description,
        )
        return True

    def delete(self, schedule_id: int) -> bool:
        return self.schedules.pop(int(schedule_id), None) is not None

    def count(self) -> int:
        return len(self.schedules)


class InMemoryTasks:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.tasks: dict[int, Task] = {}
        self.completions: dict[tuple[int, int], TaskCompletion] = {}
        self._ids = itertools.count(1)

    def list_all(self) -> Sequence[Task]:
        return sorted(self.tasks.values(), key=lambda t: t.deadline)

    def list_upcoming(self, *, now: datetime, limit: int) -> Sequence[Task]:
        return [t for t in self.list_all() if t.deadline >= now][:limit]

    def count_active(self, *, now: datetime) -> int:
        return sum(1 for t in self.tasks.values() if t.deadline >= now)

    def get_by_id(self, task_id: int) -> Optional[Task]:
        return self.tasks.get(int(task_id))

    def create(self, data: TaskInput, *, created_by: int) -> int:
        t = Task(
            task_id=next(self._ids),
            course_name=data.course_name,
            deadline=data.deadline,
            description=data.description,
            created_by=created_by,
        )
        self.tasks[t.task_id] = t
        return t.task_id

    def update(self, task_id: int, data: TaskInput) -> bool:
        t = self.tasks.get(int(task_id))
        if not t:
            return False
        self.tasks[t.task_id] = replace(t, course_name=data.course_name, deadline=data.deadline, description=data.description)
        return True

    def delete(self, task_id: int) -> bool:
        self.completions = {k: v for k, v in self.completions.items() if k[0] != int(task_id)}
        return self.tasks.pop(int(task_id), None) is not None

    def completions_for_user(self, user_id: int) -> Sequence[TaskCompletion]:
        return [c for (_, uid), c in self.completions.items() if uid == int(user_id)]

    def upsert_completion(self, *, task_id: int, user_id: int, status: CompletionStatus, completed_at: Optional[datetime]) -> None:
        self.completions[(int(task_id), int(user_id))] = TaskCompletion(
            task_id=int(task_id), user_id=int(user_id), status=status, completed_at=completed_at
        )

    def completion_stats(self) -> Sequence[TaskCompletionStat]:
        total_users = sum(1 for u in self._users.users.values() if u.role in {Role.MEMBER, Role.ADMIN})
        return [
            TaskCompletionStat(
                task_id=t.task_id,
                course_name=t.course_name,
                completed_count=sum(
                    1 for (tid, _), c in self.completions.items() if tid == t.task_id and c.is_completed
                ),
                total_users=total_users,
            )
            for t in self.list_all()
        ]


class InMemoryAttendance:
    def __init__(self, users: InMemoryUsers, schedules: InMemorySchedules):
        self._users = users
        self._schedules = schedules
        self.records: dict[int, AttendanceRecord] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self._created: dict[int, int] = {}

    def add(
        self,
        *,
        user_id: int,
        schedule_id: int,
        attendance_date: date,
        status: AttendanceStatus = AttendanceStatus.PENDING,
        created_at: Optional[datetime] = None,
    ) -> AttendanceRecord:
        rec = AttendanceRecord(
            attendance_id=next(self._ids),
            user_id=user_id,
            schedule_id=schedule_id,
            attendance_date=attendance_date,
            status=status,
            created_at=created_at or datetime.combine(attendance_date, time(8, 0)),
        )
        self.records[rec.attendance_id] = rec
        self._created[rec.attendance_id] = next(self._clock)
        return rec

    def _row(self, rec: AttendanceRecord) -> AttendanceRow:
        user = self._users.get_by_id(rec.user_id)
        schedule = self._schedules.get_by_id(rec.schedule_id)
        approver = self._users.get_by_id(rec.approved_by) if rec.approved_by else None
        return AttendanceRow(
            attendance_id=rec.attendance_id,
            user_id=rec.user_id,
            user_name=user.full_name,
            npm=user.npm,
            user_role=user.role,
            schedule_id=rec.schedule_id,
            course_name=schedule.course_name if schedule else "",
            attendance_date=rec.attendance_date,
            status=rec.status,
            created_at=rec.created_at,
            approved_by=rec.approved_by,
            approver_name=approver.full_name if approver else None,
            approved_at=rec.approved_at,
        )

    def list_rows(self, *, user_id=None, attendance_date=None, status=None, submitter_role=None, oldest_first=False):
        rows = [self._row(r) for r in self.records.values()]
        if user_id is not None:
            rows = [r for r in rows if r.user_id == user_id]
        if attendance_date is not None:
            rows = [r for r in rows if r.attendance_date == attendance_date]
        if status is not None:
            rows = [r for r in rows if r.status == status]
        if submitter_role is not None:
            rows = [r for r in rows if r.user_role == submitter_role]
        if oldest_first:
            return sorted(rows, key=lambda r: (r.attendance_date, self._created[r.attendance_id]))
        return sorted(rows, key=lambda r: self._created[r.attendance_id], reverse=True)

    def get_row(self, attendance_id: int) -> Optional[AttendanceRow]:
        rec = self.records.get(int(attendance_id))
        return self._row(rec) if rec else None

    def list_for_user_between(self, *, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        return [r for r in self.records.values() if r.user_id == user_id and start <= r.attendance_date <= end]

    def attended_schedule_ids(self, *, user_id: int, attendance_date: date) -> set[int]:
        return {r.schedule_id for r in self.records.values() if r.user_id == user_id and r.attendance_date == attendance_date}

    def create(self, *, user_id: int, schedule_id: int, attendance_date: date) -> int:
        for r in self.records.values():
            if (r.user_id, r.schedule_id, r.attendance_date) == (user_id, schedule_id, attendance_date):
                raise ConflictError("Data sudah ada")
        return self.add(user_id=user_id, schedule_id=schedule_id, attendance_date=attendance_date).attendance_id

    def decide(self, *, attendance_id: int, status: AttendanceStatus, approved_by: int, approved_at: datetime) -> bool:
        rec = self.records.get(int(attendance_id))
        if not rec or rec.status != AttendanceStatus.PENDING:
            return False
        self.records[rec.attendance_id] = replace(rec, status=status, approved_by=approved_by, approved_at=approved_at)
        return True


class InMemoryNotifications:
    def __init__(self):
        self.items: dict[int, Notification] = {}
        self._ids = itertools.count(1)

    def list_for_user(self, user_id: int, *, limit: int) -> Sequence[Notification]:
        mine = [n for n in self.items.values() if n.user_id == user_id]
        return sorted(mine, key=lambda n: n.notification_id, reverse=True)[:limit]

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.items.get(int(notification_id))

    def create_many(self, items: Sequence[NewNotification]) -> list[int]:
        ids = []
        for item in items:
            n = Notification(
                notification_id=next(self._ids),
                user_id=item.user_id,
                title=item.title,
                message=item.message,
                type=item.type,
                is_read=False,
                created_at=datetime(2025, 1, 1, 9, 0),
            )
            self.items[n.notification_id] = n
            ids.append(n.notification_id)
        return ids

    def mark_read(self, *, user_id: int, notification_ids: Sequence[int]) -> int:
        changed = 0
        for nid in notification_ids:
            n = self.items.get(int(nid))
            if n and n.user_id == user_id and not n.is_read:
                self.items[n.notification_id] = n.mark_read()
                changed += 1
        return changed

    def delete(self, *, user_id: int, notification_id: int) -> bool:
        n = self.items.get(int(notification_id))
        if not n or n.user_id != user_id:
            return False
        del self.items[n.notification_id]
        return True


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def schedules(users) -> InMemorySchedules:
    return InMemorySchedules(users)


@pytest.fixture
def tasks(users) -> InMemoryTasks:
    return InMemoryTasks(users)


@pytest.fixture
def attendance(users, schedules) -> InMemoryAttendance:
    return InMemoryAttendance(users, schedules)


@pytest.fixture
def notifications() -> InMemoryNotifications:
    return InMemoryNotifications()


@pytest.fixture
def container(users, schedules, tasks, attendance, notifications) -> Container:
    return wire_container(
        users_repo=users,
        schedules_repo=schedules,
        tasks_repo=tasks,
        attendance_repo=attendance,
        notifications_repo=notifications,
        registration_code=REGISTRATION_CODE,
    )


@pytest.fixture
def people(users):
    """A super admin, two admins and two members."""
    return {
        "super": users.add("Super Admin", "10000000", Role.SUPER_ADMIN),
        "admin": users.add("Admin Satu", "20000001", Role.ADMIN),
        "admin2": users.add("Admin Dua", "20000002", Role.ADMIN),
        "member": users.add("Budi Santoso", "30000001", Role.MEMBER),
        "member2": users.add("Siti Aminah", "30000002", Role.MEMBER),
    }
