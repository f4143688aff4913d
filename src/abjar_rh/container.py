from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.hub import NotificationHub
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    schedules_repo: ScheduleRepository
    tasks_repo: TaskRepository
    attendance_repo: AttendanceRepository
    notifications_repo: NotificationRepository

    hub: NotificationHub
    notification_service: NotificationService
    auth_service: AuthService
    user_service: UserService
    schedule_service: ScheduleService
    task_service: TaskService
    attendance_service: AttendanceService
    dashboard_service: DashboardService


def wire_container(
    *,
    users_repo: UserRepository,
    schedules_repo: ScheduleRepository,
    tasks_repo: TaskRepository,
    attendance_repo: AttendanceRepository,
    notifications_repo: NotificationRepository,
    registration_code: str,
    conn: Optional[DatabaseConnection] = None,
    hub: Optional[NotificationHub] = None,
) -> Container:
    """Build services on top of any repositories (MySQL in the app, fakes in tests)."""
    hub = hub or NotificationHub()
    notification_service = NotificationService(notifications_repo, hub)

    auth_service = AuthService(users_repo, registration_code=registration_code)
    user_service = UserService(users_repo, notification_service)
    schedule_service = ScheduleService(schedules_repo, users_repo)
    task_service = TaskService(tasks_repo, users_repo, notification_service)
    attendance_service = AttendanceService(attendance_repo, schedules_repo, users_repo, notification_service)
    dashboard_service = DashboardService(
        users=users_repo,
        attendance=attendance_repo,
        attendance_service=attendance_service,
        schedule_service=schedule_service,
        task_service=task_service,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        schedules_repo=schedules_repo,
        tasks_repo=tasks_repo,
        attendance_repo=attendance_repo,
        notifications_repo=notifications_repo,
        hub=hub,
        notification_service=notification_service,
        auth_service=auth_service,
        user_service=user_service,
        schedule_service=schedule_service,
        task_service=task_service,
        attendance_service=attendance_service,
        dashboard_service=dashboard_service,
    )


def build_container(*, db_config: dict, registration_code: str) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        registration_code=registration_code,
    )
