"""Storage collaborator the check-in core depends on."""
from __future__ import annotations

from datetime import date
from typing import Protocol

from eduface.checkin.schemas import AttendanceFact, CandidateStudent, SessionWindow


class AttendanceStore(Protocol):
    """CRUD and uniqueness queries over students, subjects and attendance.

    Implementations raise :class:`~eduface.checkin.errors.StorageUnavailable`
    when the backend cannot be reached and
    :class:`~eduface.checkin.errors.DuplicateRecord` when ``record_attendance``
    hits the (student, subject, date) uniqueness constraint.
    """

    async def list_eligible_students(self) -> list[CandidateStudent]:
        """Approved students with a reference image, in registration order."""

    async def get_student_by_id(self, student_id: str) -> CandidateStudent | None:
        ...

    async def get_student_by_admission_number(self, admission_number: str) -> CandidateStudent | None:
        ...

    async def load_reference_image(self, student: CandidateStudent) -> bytes:
        ...

    async def attendance_exists(self, student_id: str, subject_code: str, on_date: date) -> bool:
        ...

    async def record_attendance(self, fact: AttendanceFact) -> AttendanceFact:
        """Atomically insert ``fact``; returns it with its assigned id."""

    async def list_subjects(self) -> list[SessionWindow]:
        ...
