from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
import pandas as pd
import io

from eduface.api.deps import CurrentUser, scope_for
from eduface.config import settings
from eduface.models.attendance import AttendanceRecord
from eduface.models.student import Student
from eduface.models.subject import Subject
from eduface.services.stats import scoped_records

router = APIRouter()

REPORT_COLUMNS = ["Date", "Name", "Department", "Subject", "Status", "Time"]


def _parse_date(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field} (YYYY-MM-DD)")


async def _find_records(
    user,
    from_date: Optional[str],
    to_date: Optional[str],
    department: Optional[str],
    subject: Optional[str],
) -> list[AttendanceRecord]:
    scope = scope_for(user)
    query: dict = {}
    d_from = _parse_date(from_date, "from_date")
    d_to = _parse_date(to_date, "to_date")
    if d_from or d_to:
        query["date"] = {}
        if d_from:
            query["date"]["$gte"] = d_from
        if d_to:
            query["date"]["$lte"] = d_to
    department = scope.department or department
    if department:
        query["department"] = department
    if subject:
        query["subject"] = subject
    records = await AttendanceRecord.find(query).sort("-timestamp").to_list()
    if scope.year:
        students = await Student.find(Student.department == scope.department).to_list()
        records = scoped_records(records, students, scope)
    return records


def _local_time(ts: datetime, tz: tzinfo) -> datetime:
    # MongoDB hands back naive UTC datetimes
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz)


def report_frame(records: list, subject_names: dict[str, str], tz: tzinfo = timezone.utc) -> pd.DataFrame:
    """One row per check-in, newest first, with the subject's display name and campus-local time."""
    rows = [
        {
            "Date": r.date.isoformat(),
            "Name": r.student_name,
            "Department": r.department,
            "Subject": subject_names.get(r.subject, r.subject),
            "Status": getattr(r.status, "value", r.status),
            "Time": _local_time(r.timestamp, tz).strftime("%H:%M:%S"),
        }
        for r in sorted(records, key=lambda r: r.timestamp, reverse=True)
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


@router.get("/")
async def list_attendance(
    user: CurrentUser,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    department: Optional[str] = None,
    subject: Optional[str] = Query(None, description="Subject code"),
):
    records = await _find_records(user, from_date, to_date, department, subject)
    return [
        {
            "id": str(r.id),
            "student_id": r.student_id,
            "student_name": r.student_name,
            "department": r.department,
            "subject": r.subject,
            "date": r.date.isoformat(),
            "timestamp": r.timestamp.isoformat(),
            "status": r.status.value,
            "verification_confidence": r.verification_confidence,
        }
        for r in records
    ]


@router.get("/report")
async def download_attendance_report(
    user: CurrentUser,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    department: Optional[str] = None,
    subject: Optional[str] = None,
    format: str = Query("csv", enum=["csv", "excel"]),
):
    """Download attendance records as CSV or Excel."""
    records = await _find_records(user, from_date, to_date, department, subject)
    if not records:
        raise HTTPException(status_code=404, detail="No records found for the given criteria")

    subjects = await Subject.find_all().to_list()
    df = report_frame(records, {s.code: s.name for s in subjects}, ZoneInfo(settings.campus_timezone))
    stamp = date.today().isoformat()

    if format == "csv":
        stream = io.StringIO()
        df.to_csv(stream, index=False)
        return StreamingResponse(
            iter([stream.getvalue()]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=attendance_report_{stamp}.csv"},
        )
    else:
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Attendance")
        output.seek(0)
        return StreamingResponse(
            output,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename=attendance_report_{stamp}.xlsx"},
        )
