from datetime import date, datetime

import pytest

from abjar_rh.core.enums import AttendanceStatus, NotificationType, Role
from abjar_rh.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from abjar_rh.schedules.service import ScheduleService
from abjar_rh.users.model import SessionUser

# 2025-01-06 is a Monday
MONDAY_0830 = datetime(2025, 1, 6, 8, 30)


@pytest.fixture
def class_id(container, people):
    data = ScheduleService.build_input(course_name="Basis Data", day="Senin", start_time="08:00", end_time="09:40")
    return container.schedule_service.create(SessionUser.from_user(people["admin"]), data)


def test_submit_inside_window(container, attendance, people, class_id):
    member = SessionUser.from_user(people["member"])
    aid = container.attendance_service.submit(member, class_id, now=MONDAY_0830)

    row = attendance.get_row(aid)
    assert row.status == AttendanceStatus.PENDING
    assert row.attendance_date == date(2025, 1, 6)

    with pytest.raises(ConflictError):
        container.attendance_service.submit(member, class_id, now=MONDAY_0830.replace(minute=45))


def test_submit_window_bounds_are_inclusive(container, people, class_id):
    svc = container.attendance_service
    svc.submit(SessionUser.from_user(people["member"]), class_id, now=datetime(2025, 1, 6, 8, 0))
    svc.submit(SessionUser.from_user(people["member2"]), class_id, now=datetime(2025, 1, 6, 9, 40, 30))

    with pytest.raises(ValidationError):
        svc.submit(SessionUser.from_user(people["admin"]), class_id, now=datetime(2025, 1, 6, 9, 41))


def test_submit_rejections(container, people, class_id):
    member = SessionUser.from_user(people["member"])
    svc = container.attendance_service

    with pytest.raises(ValidationError):
        svc.submit(member, class_id, now=datetime(2025, 1, 7, 8, 30))
    with pytest.raises(ValidationError):
        svc.submit(member, class_id, now=datetime(2025, 1, 6, 7, 59))
    with pytest.raises(NotFoundError):
        svc.submit(member, 999, now=MONDAY_0830)
    with pytest.raises(AuthorizationError):
        svc.submit(SessionUser.from_user(people["super"]), class_id, now=MONDAY_0830)


def test_today_schedules_flags(container, people, class_id):
    member = SessionUser.from_user(people["member"])
    svc = container.attendance_service

    before = svc.today_schedules(member, now=MONDAY_0830)
    assert [(s["id"], s["has_attended"], s["can_attend"]) for s in before] == [(class_id, False, True)]

    svc.submit(member, class_id, now=MONDAY_0830)
    after = svc.today_schedules(member, now=MONDAY_0830)
    assert (after[0]["has_attended"], after[0]["can_attend"]) == (True, False)

    assert svc.today_schedules(SessionUser.from_user(people["super"]), now=MONDAY_0830) == []


def test_admin_approves_member_and_member_is_notified(container, attendance, notifications, people, class_id):
    svc = container.attendance_service
    aid = svc.submit(SessionUser.from_user(people["member"]), class_id, now=MONDAY_0830)

    decided_at = datetime(2025, 1, 6, 10, 0)
    row = svc.decide(SessionUser.from_user(people["admin"]), aid, AttendanceStatus.APPROVED, now=decided_at)
    assert row.status == AttendanceStatus.APPROVED
    assert row.approved_by == people["admin"].user_id
    assert row.approved_at == decided_at
    assert row.approver_name == "Admin Satu"

    inbox = notifications.list_for_user(people["member"].user_id, limit=20)
    assert inbox[0].type == NotificationType.ATTENDANCE

    with pytest.raises(ValidationError):
        svc.decide(SessionUser.from_user(people["admin2"]), aid, AttendanceStatus.REJECTED, now=decided_at)


def test_approval_chain(container, people, class_id):
    svc = container.attendance_service
    by_admin = svc.submit(SessionUser.from_user(people["admin"]), class_id, now=MONDAY_0830)
    by_member = svc.submit(SessionUser.from_user(people["member"]), class_id, now=MONDAY_0830)

    with pytest.raises(AuthorizationError):
        svc.decide(SessionUser.from_user(people["admin2"]), by_admin, AttendanceStatus.APPROVED, now=MONDAY_0830)
    with pytest.raises(AuthorizationError):
        svc.decide(SessionUser.from_user(people["super"]), by_member, AttendanceStatus.APPROVED, now=MONDAY_0830)
    with pytest.raises(AuthorizationError):
        svc.decide(SessionUser.from_user(people["member2"]), by_member, AttendanceStatus.REJECTED, now=MONDAY_0830)

    row = svc.decide(SessionUser.from_user(people["super"]), by_admin, AttendanceStatus.REJECTED, now=MONDAY_0830)
    assert row.status == AttendanceStatus.REJECTED


def test_decide_uses_submitter_current_role(container, users, people, class_id):
    svc = container.attendance_service
    aid = svc.submit(SessionUser.from_user(people["member"]), class_id, now=MONDAY_0830)

    # free a slot, then promote the submitter after they submitted as a member
    users.update_role(people["admin2"].user_id, Role.MEMBER, expected_role=Role.ADMIN)
    users.update_role(people["member"].user_id, Role.ADMIN, expected_role=Role.MEMBER)

    with pytest.raises(AuthorizationError):
        svc.decide(SessionUser.from_user(people["admin"]), aid, AttendanceStatus.APPROVED, now=MONDAY_0830)
    svc.decide(SessionUser.from_user(people["super"]), aid, AttendanceStatus.APPROVED, now=MONDAY_0830)


def test_decide_rejects_pending_as_target(container, people, class_id):
    aid = container.attendance_service.submit(SessionUser.from_user(people["member"]), class_id, now=MONDAY_0830)
    with pytest.raises(ValidationError):
        container.attendance_service.decide(SessionUser.from_user(people["admin"]), aid, AttendanceStatus.PENDING, now=MONDAY_0830)


def test_list_scoping_filters_and_paging(container, attendance, people, class_id):
    for day in range(1, 13):
        attendance.add(user_id=people["member"].user_id, schedule_id=class_id, attendance_date=date(2025, 1, day))
    attendance.add(
        user_id=people["member2"].user_id,
        schedule_id=class_id,
        attendance_date=date(2025, 1, 6),
        status=AttendanceStatus.APPROVED,
    )
    attendance.add(user_id=people["admin"].user_id, schedule_id=class_id, attendance_date=date(2025, 1, 6))

    svc = container.attendance_service

    own = svc.list_records(SessionUser.from_user(people["member2"]), status_filter=AttendanceStatus.PENDING)
    # members cannot filter; they always get their own rows
    assert own["stats"]["total"] == 1
    assert own["items"][0]["can_approve"] is False

    as_admin = svc.list_records(SessionUser.from_user(people["admin"]))
    assert as_admin["stats"] == {"total": 14, "pending": 13, "approved": 1, "rejected": 0}
    assert len(as_admin["items"]) == 10
    assert as_admin["pagination"]["total_pages"] == 2
    # newest submission first
    assert as_admin["items"][0]["user_id"] == people["admin"].user_id
    assert as_admin["items"][0]["can_approve"] is False
    assert as_admin["items"][2]["can_approve"] is True

    page2 = svc.list_records(SessionUser.from_user(people["admin"]), page=2)
    assert len(page2["items"]) == 4

    jan6 = svc.list_records(SessionUser.from_user(people["super"]), date_filter=date(2025, 1, 6))
    assert jan6["stats"]["total"] == 3
    approved = svc.list_records(
        SessionUser.from_user(people["super"]),
        date_filter=date(2025, 1, 6),
        status_filter=AttendanceStatus.APPROVED,
    )
    assert [r["user_id"] for r in approved["items"]] == [people["member2"].user_id]


def test_pending_count_by_role(container, attendance, people, class_id):
    attendance.add(user_id=people["member"].user_id, schedule_id=class_id, attendance_date=date(2025, 1, 6))
    attendance.add(user_id=people["member2"].user_id, schedule_id=class_id, attendance_date=date(2025, 1, 6))
    attendance.add(user_id=people["admin"].user_id, schedule_id=class_id, attendance_date=date(2025, 1, 6))

    svc = container.attendance_service
    assert svc.pending_count_for(SessionUser.from_user(people["super"])) == 1
    assert svc.pending_count_for(SessionUser.from_user(people["admin2"])) == 2
    assert svc.pending_count_for(SessionUser.from_user(people["member"])) == 1
