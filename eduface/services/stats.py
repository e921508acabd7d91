"""Dashboard statistics over students, attendance records and class configurations.

Everything here is a plain function over already-loaded objects; the routes do
the querying. Objects only need the attributes used below, so ODM documents
and snapshots both work.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional


@dataclass
class Scope:
    """What a staff member may see: everything, one department, or one class year."""

    department: Optional[str] = None
    year: Optional[str] = None

    def includes_student(self, student) -> bool:
        if self.department and student.department != self.department:
            return False
        if self.year and student.year != self.year:
            return False
        return True

    def includes_config(self, config) -> bool:
        if self.department and config.department != self.department:
            return False
        if self.year and config.year != self.year:
            return False
        return True


def percent(part: int, whole: int) -> int:
    """Rounded percentage, halves rounding up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def scoped_records(records: Iterable, students: Iterable, scope: Scope) -> list:
    if not scope.department and not scope.year:
        return list(records)
    ids = {str(s.id) for s in students if scope.includes_student(s)}
    return [r for r in records if r.student_id in ids]


def expected_headcount(approved_count: int, configs: Iterable, scope: Scope) -> int:
    """Configured class sizes in scope override the approved-student count."""
    configured = [c.total_students for c in configs if scope.includes_config(c)]
    return sum(configured) if configured else approved_count


def overview_stats(
    students: list,
    records: list,
    departments: list,
    configs: list,
    today: date,
    scope: Scope | None = None,
) -> dict[str, Any]:
    scope = scope or Scope()
    in_scope = [s for s in students if scope.includes_student(s)]
    approved = [s for s in in_scope if s.is_approved]
    pending = [s for s in in_scope if not s.is_approved]
    visible = scoped_records(records, students, scope)
    present_today = sum(1 for r in visible if r.date == today)
    headcount = expected_headcount(len(approved), configs, scope)

    department_rows = []
    for d in departments:
        if scope.department and d.name != scope.department:
            continue
        department_rows.append(
            {
                "name": d.key.upper(),
                "department": d.name,
                "students": sum(1 for s in approved if s.department == d.name),
                "present": sum(1 for r in visible if r.department == d.name),
            }
        )

    return {
        "total_enrolled": len(approved),
        "pending_approval": len(pending),
        "present_today": present_today,
        "expected_headcount": headcount,
        "attendance_rate": percent(present_today, headcount),
        "date": today.isoformat(),
        "departments": department_rows,
    }


def student_stats(student, records: list) -> dict[str, Any]:
    """Attendance summary for one student.

    ``total_classes`` counts the distinct (subject, date) sessions in which anyone
    from the student's department checked in.
    """
    student_id = str(student.id)
    mine = sorted(
        (r for r in records if r.student_id == student_id),
        key=lambda r: r.timestamp,
        reverse=True,
    )
    held = {(r.subject, r.date) for r in records if r.department == student.department}
    total_classes = max(len(held), len(mine))
    return {
        "student_id": student_id,
        "name": student.name,
        "present": len(mine),
        "total_classes": total_classes,
        "absent": total_classes - len(mine),
        "percentage": percent(len(mine), total_classes),
        "records": [
            {
                "date": r.date.isoformat(),
                "subject": r.subject,
                "status": getattr(r.status, "value", r.status),
                "timestamp": r.timestamp.isoformat(),
                "verification_confidence": r.verification_confidence,
            }
            for r in mine
        ],
    }
