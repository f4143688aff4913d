import io
from datetime import date, datetime, timedelta

from openpyxl import load_workbook

from abjar_rh.attendance.export import (
    SUMMARY_COLUMNS,
    WEEK_COLUMNS,
    build_workbook,
    export_filename,
    group_by_week,
)
from abjar_rh.attendance.model import AttendanceRow
from abjar_rh.common.datetime_utils import week_number
from abjar_rh.core.enums import AttendanceStatus, Role
from abjar_rh.schedules.service import ScheduleService
from abjar_rh.users.model import SessionUser


def _row(i: int, day: date, status: AttendanceStatus) -> AttendanceRow:
    return AttendanceRow(
        attendance_id=i,
        user_id=1,
        user_name="Budi Santoso",
        npm="30000001",
        user_role=Role.MEMBER,
        schedule_id=1,
        course_name="Basis Data",
        attendance_date=day,
        status=status,
        created_at=datetime.combine(day, datetime.min.time()) + timedelta(hours=8),
        approver_name="Admin Satu" if status != AttendanceStatus.PENDING else None,
    )


def _thirteen_rows() -> list[AttendanceRow]:
    # 2025-01-29..2025-02-04 is week 5, 2025-02-05..2025-02-11 is week 6
    rows = []
    statuses = [AttendanceStatus.APPROVED, AttendanceStatus.PENDING, AttendanceStatus.REJECTED]
    for i in range(7):
        rows.append(_row(i + 1, date(2025, 1, 29) + timedelta(days=i), statuses[i % 3]))
    for i in range(6):
        rows.append(_row(i + 8, date(2025, 2, 5) + timedelta(days=i), AttendanceStatus.APPROVED))
    return rows


def test_week_number():
    assert week_number(date(2025, 1, 1)) == 1
    assert week_number(date(2025, 1, 7)) == 1
    assert week_number(date(2025, 1, 8)) == 2
    assert week_number(date(2024, 12, 31)) == 53

    weeks = [week_number(date(2025, 1, 1) + timedelta(days=i)) for i in range(365)]
    assert weeks == sorted(weeks)


def test_group_by_week_sorted():
    grouped = group_by_week(reversed(_thirteen_rows()))
    assert list(grouped) == [5, 6]
    assert len(grouped[5]) == 7
    assert len(grouped[6]) == 6


def test_workbook_has_summary_then_weekly_sheets():
    wb = load_workbook(io.BytesIO(build_workbook(_thirteen_rows())))
    assert wb.sheetnames == ["Ringkasan", "Minggu 5", "Minggu 6"]

    summary = wb["Ringkasan"]
    assert [c.value for c in summary[1]] == SUMMARY_COLUMNS
    assert [c.value for c in summary[2]] == [5, 7, 3, 2, 2]
    assert [c.value for c in summary[3]] == [6, 6, 6, 0, 0]

    week5 = wb["Minggu 5"]
    assert [c.value for c in week5[1]] == WEEK_COLUMNS
    assert week5.max_row == 8
    first = [c.value for c in week5[2]]
    assert first[:6] == [5, "29/01/2025", "Budi Santoso", "30000001", "Basis Data", "Disetujui"]
    assert first[7] == "Admin Satu"
    assert week5["F3"].value == "Menunggu"
    assert week5["H3"].value == "-"
    assert week5["I3"].value == "-"

    assert week5["A1"].font.bold
    assert week5.column_dimensions["E"].width == 25

    assert wb["Minggu 6"].max_row == 7


def test_empty_export_only_has_summary():
    wb = load_workbook(io.BytesIO(build_workbook([])))
    assert wb.sheetnames == ["Ringkasan"]
    assert [c.value for c in wb["Ringkasan"][1]] == SUMMARY_COLUMNS


def test_export_filename():
    today = date(2025, 2, 10)
    assert export_filename(full_name="Super Admin", export_all=True, today=today) == "Absensi_Semua_Data_2025-02-10.xlsx"
    assert export_filename(full_name="Budi  Santoso", export_all=False, today=today) == "Absensi_Budi_Santoso_2025-02-10.xlsx"


def test_export_scope_follows_role(container, attendance, people):
    sid = container.schedule_service.create(
        SessionUser.from_user(people["admin"]),
        ScheduleService.build_input(course_name="Basis Data", day="Senin", start_time="08:00", end_time="09:40"),
    )
    attendance.add(user_id=people["member"].user_id, schedule_id=sid, attendance_date=date(2025, 2, 3))
    attendance.add(user_id=people["member2"].user_id, schedule_id=sid, attendance_date=date(2025, 2, 10))

    mine = container.attendance_service.export(SessionUser.from_user(people["member"]), today=date(2025, 2, 10))
    assert mine.filename == "Absensi_Budi_Santoso_2025-02-10.xlsx"
    assert load_workbook(io.BytesIO(mine.content)).sheetnames == ["Ringkasan", "Minggu 5"]

    everything = container.attendance_service.export(SessionUser.from_user(people["super"]), today=date(2025, 2, 10))
    assert everything.filename == "Absensi_Semua_Data_2025-02-10.xlsx"
    assert load_workbook(io.BytesIO(everything.content)).sheetnames == ["Ringkasan", "Minggu 5", "Minggu 6"]
