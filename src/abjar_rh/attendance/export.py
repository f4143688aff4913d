from __future__ import annotations

import io
import re
from collections import defaultdict
from datetime import date, datetime
from typing import Iterable, Optional

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..common.datetime_utils import week_number
from ..core.enums import AttendanceStatus
from .model import AttendanceRow

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SUMMARY_SHEET = "Ringkasan"
SUMMARY_COLUMNS = ["Minggu Ke", "Total Absensi", "Disetujui", "Menunggu", "Ditolak"]
WEEK_COLUMNS = [
    "Minggu Ke",
    "Tanggal",
    "Nama",
    "NPM",
    "Mata Kuliah",
    "Status",
    "Waktu Absen",
    "Disetujui Oleh",
    "Waktu Disetujui",
]
WEEK_COLUMN_WIDTHS = [12, 15, 20, 15, 25, 12, 20, 20, 20]
SUMMARY_COLUMN_WIDTHS = [12, 15, 12, 12, 12]

_SUMMARY_HEADER_FILL = "4F46E5"
_WEEK_HEADER_FILL = "3B82F6"
_THIN = Side(style="thin", color="000000")
_BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)


def week_sheet_name(week: int) -> str:
    return f"Minggu {week}"


def export_filename(*, full_name: Optional[str], export_all: bool, today: date) -> str:
    stamp = today.isoformat()
    if export_all:
        return f"Absensi_Semua_Data_{stamp}.xlsx"
    name = re.sub(r"\s+", "_", (full_name or "").strip())
    return f"Absensi_{name}_{stamp}.xlsx"


def _fmt_datetime(value: Optional[datetime]) -> str:
    return value.strftime("%d/%m/%Y %H:%M") if value else "-"


def _to_week_record(week: int, row: AttendanceRow) -> dict:
    return {
        "Minggu Ke": week,
        "Tanggal": row.attendance_date.strftime("%d/%m/%Y"),
        "Nama": row.user_name or "",
        "NPM": row.npm or "",
        "Mata Kuliah": row.course_name or "",
        "Status": row.status.label,
        "Waktu Absen": _fmt_datetime(row.created_at),
        "Disetujui Oleh": row.approver_name or "-",
        "Waktu Disetujui": _fmt_datetime(row.approved_at),
    }


def group_by_week(rows: Iterable[AttendanceRow]) -> dict[int, list[AttendanceRow]]:
    """Group rows by week bucket, keys in ascending order."""
    weeks: dict[int, list[AttendanceRow]] = defaultdict(list)
    for row in rows:
        weeks[week_number(row.attendance_date)].append(row)
    return {w: weeks[w] for w in sorted(weeks)}


def _summary_record(week: int, rows: list[AttendanceRow]) -> dict:
    return {
        "Minggu Ke": week,
        "Total Absensi": len(rows),
        "Disetujui": sum(1 for r in rows if r.status == AttendanceStatus.APPROVED),
        "Menunggu": sum(1 for r in rows if r.status == AttendanceStatus.PENDING),
        "Ditolak": sum(1 for r in rows if r.status == AttendanceStatus.REJECTED),
    }


def _style_sheet(ws: Worksheet, *, header_fill: str, widths: list[int]) -> None:
    fill = PatternFill(fill_type="solid", start_color=header_fill, end_color=header_fill)
    header_font = Font(bold=True, color="FFFFFF")

    for row in ws.iter_rows(min_row=1, max_row=ws.max_row, max_col=len(widths)):
        for cell in row:
            cell.border = _BORDER
            if cell.row == 1:
                cell.fill = fill
                cell.font = header_font

    for idx, width in enumerate(widths):
        ws.column_dimensions[chr(ord("A") + idx)].width = width


def build_workbook(rows: Iterable[AttendanceRow]) -> bytes:
    """Render attendance rows into an .xlsx: a summary sheet, then one sheet per week."""
    weeks = group_by_week(rows)

    summary = pd.DataFrame([_summary_record(w, items) for w, items in weeks.items()], columns=SUMMARY_COLUMNS)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary.to_excel(writer, index=False, sheet_name=SUMMARY_SHEET)
        _style_sheet(writer.sheets[SUMMARY_SHEET], header_fill=_SUMMARY_HEADER_FILL, widths=SUMMARY_COLUMN_WIDTHS)

        for week, items in weeks.items():
            name = week_sheet_name(week)
            df = pd.DataFrame([_to_week_record(week, r) for r in items], columns=WEEK_COLUMNS)
            df.to_excel(writer, index=False, sheet_name=name)
            _style_sheet(writer.sheets[name], header_fill=_WEEK_HEADER_FILL, widths=WEEK_COLUMN_WIDTHS)

    return output.getvalue()
