"""Role predicates.

The three roles do not form a ranking: approvals flow super_admin -> admin ->
member, one level at a time. Callers must evaluate these against freshly
fetched roles, never against what was cached at login.
"""

from __future__ import annotations

from .constants import MAX_ADMINS
from .enums import AttendanceStatus, Role


def can_approve_attendance(actor_role: Role, submitter_role: Role, status: AttendanceStatus) -> bool:
    if status != AttendanceStatus.PENDING:
        return False
    if actor_role == Role.SUPER_ADMIN:
        return submitter_role == Role.ADMIN
    if actor_role == Role.ADMIN:
        return submitter_role == Role.MEMBER
    return False


def can_promote_to_admin(
    *,
    actor_role: Role,
    actor_id: int,
    target_role: Role,
    target_id: int,
    admin_count: int,
) -> bool:
    if actor_role != Role.SUPER_ADMIN:
        return False
    if int(target_id) == int(actor_id):
        return False
    return target_role == Role.MEMBER and admin_count < MAX_ADMINS


def can_demote_from_admin(*, actor_role: Role, actor_id: int, target_role: Role, target_id: int) -> bool:
    if actor_role != Role.SUPER_ADMIN:
        return False
    if int(target_id) == int(actor_id):
        return False
    return target_role == Role.ADMIN


def can_attend_class(role: Role) -> bool:
    # super_admin has no classes to attend
    return role in {Role.MEMBER, Role.ADMIN}


def can_manage_schedule(role: Role) -> bool:
    return role in {Role.ADMIN, Role.SUPER_ADMIN}


def can_manage_task(role: Role) -> bool:
    return role in {Role.ADMIN, Role.SUPER_ADMIN}


def can_mark_task_complete(role: Role) -> bool:
    return role in {Role.MEMBER, Role.ADMIN}


def can_view_task_stats(role: Role) -> bool:
    return role in {Role.ADMIN, Role.SUPER_ADMIN}


def can_filter_attendance(role: Role) -> bool:
    return role in {Role.ADMIN, Role.SUPER_ADMIN}


def can_download_attendance(role: Role) -> bool:
    return role in {Role.MEMBER, Role.ADMIN, Role.SUPER_ADMIN}


def can_export_all_attendance(role: Role) -> bool:
    return role == Role.SUPER_ADMIN


def can_manage_users(role: Role) -> bool:
    return role == Role.SUPER_ADMIN
