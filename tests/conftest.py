"""Shared fixtures: an in-memory store and a scripted face comparison oracle."""
from __future__ import annotations

import os

# Settings refuse the placeholder JWT secret outside debug mode.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("GEMINI_API_KEY", "")

from datetime import date, datetime, timedelta

import pytest

from eduface.checkin.errors import DuplicateRecord, StorageUnavailable
from eduface.checkin.oracle import VerificationAdapter
from eduface.checkin.orchestrator import CheckInOrchestrator
from eduface.checkin.schemas import AttendanceFact, CandidateStudent, SessionWindow

MORNING = datetime(2025, 3, 10, 9, 15)


class InMemoryStore:
    """Dict-backed storage honouring the (student, subject, date) uniqueness rule."""

    def __init__(self, students=(), subjects=()):
        self.students: list[CandidateStudent] = list(students)
        self.subjects: list[SessionWindow] = list(subjects)
        self.records: list[AttendanceFact] = []
        self.fail_reads = False
        self.missing_images: set[str] = set()
        self.fail_writes = False
        self.write_attempts = 0
        # simulate another station winning the race between check and insert
        self.hide_existing = False

    def _check_reads(self):
        if self.fail_reads:
            raise StorageUnavailable("Attendance storage is temporarily unavailable. Please try again.")

    async def list_eligible_students(self):
        self._check_reads()
        return sorted(
            (s for s in self.students if s.is_eligible),
            key=lambda s: s.created_at,
        )

    async def get_student_by_id(self, student_id):
        self._check_reads()
        return next((s for s in self.students if s.id == student_id), None)

    async def get_student_by_admission_number(self, admission_number):
        self._check_reads()
        return next((s for s in self.students if s.admission_number == admission_number), None)

    async def load_reference_image(self, student):
        if student.id in self.missing_images:
            raise StorageUnavailable("Reference photo could not be loaded.", detail="NoSuchKey")
        return f"ref-{student.id}".encode()

    async def attendance_exists(self, student_id, subject_code, on_date):
        self._check_reads()
        if self.hide_existing:
            return False
        return any(
            r.student_id == student_id and r.subject == subject_code and r.date == on_date
            for r in self.records
        )

    async def record_attendance(self, fact):
        self.write_attempts += 1
        if self.fail_writes:
            raise StorageUnavailable("Attendance storage is temporarily unavailable. Please try again.")
        for r in self.records:
            if (r.student_id, r.subject, r.date) == (fact.student_id, fact.subject, fact.date):
                raise DuplicateRecord(fact.student_id, fact.subject, fact.date)
        saved = fact.model_copy(update={"id": f"rec-{len(self.records) + 1}"})
        self.records.append(saved)
        return saved

    async def list_subjects(self):
        self._check_reads()
        return list(self.subjects)


class ScriptedOracle:
    """Answers from a queue; an Exception instance in the queue is raised."""

    def __init__(self, *answers, default=None):
        self.answers = list(answers)
        self.default = default
        self.calls: list[tuple[bytes, bytes]] = []

    async def compare_faces(self, reference_image, captured_image):
        self.calls.append((reference_image, captured_image))
        answer = self.answers.pop(0) if self.answers else self.default
        if isinstance(answer, Exception):
            raise answer
        return answer


def match(confidence=95, same=True, analysis="Same person"):
    return {"isSamePerson": same, "confidenceScore": confidence, "analysis": analysis}


def make_student(n, admission_number=None, name=None, approved=True, photo=True, department="Computer Science"):
    return CandidateStudent(
        id=f"stu-{n}",
        admission_number=admission_number or f"ADM{n:03d}",
        name=name or f"Student {n}",
        department=department,
        year="1",
        section="A",
        reference_image_key=f"students/ADM{n:03d}.jpg" if photo else None,
        is_approved=approved,
        created_at=datetime(2025, 1, 1) + timedelta(days=n),
    )


def make_subject(code, start, end, name=None, department="Computer Science"):
    return SessionWindow(
        id=f"sub-{code}",
        name=name or code,
        code=code,
        department=department,
        start_time=start,
        end_time=end,
    )


@pytest.fixture
def alex():
    return make_student(1, admission_number="ADM001", name="Alex")


@pytest.fixture
def cs101():
    return make_subject("CS101", "09:00", "10:00", name="Data Structures")


@pytest.fixture
def store(alex, cs101):
    return InMemoryStore(students=[alex], subjects=[cs101])


@pytest.fixture
def oracle():
    return ScriptedOracle(default=match())


@pytest.fixture
def make_orchestrator():
    def build(store, oracle, now=MORNING, timeout=5.0, **kwargs):
        return CheckInOrchestrator(
            store,
            VerificationAdapter(oracle, threshold=80.0, timeout=timeout),
            clock=lambda: now,
            **kwargs,
        )

    return build


@pytest.fixture
def orchestrator(make_orchestrator, store, oracle):
    return make_orchestrator(store, oracle)


@pytest.fixture
def today():
    return date(2025, 3, 10)
