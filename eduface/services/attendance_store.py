"""MongoDB-backed storage collaborator for the check-in core."""
import logging
from contextlib import contextmanager
from datetime import date

from beanie import PydanticObjectId
from bson.errors import InvalidId
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from eduface.checkin.errors import DuplicateRecord, StorageUnavailable
from eduface.checkin.schemas import AttendanceFact, CandidateStudent, SessionWindow
from eduface.models.attendance import AttendanceRecord
from eduface.models.student import Student
from eduface.models.subject import Subject
from eduface.services.s3 import fetch_reference_image

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error(f"MongoDB error during {operation}: {e}")
        raise StorageUnavailable("Attendance storage is temporarily unavailable. Please try again.", detail=str(e)) from e


class MongoAttendanceStore:
    """Every call reads through to MongoDB; nothing is cached between attempts."""

    async def list_eligible_students(self) -> list[CandidateStudent]:
        with _storage_errors("list_eligible_students"):
            students = await Student.find(
                Student.is_approved == True,  # noqa: E712
                Student.reference_image_key != None,  # noqa: E711
            ).sort("+created_at").to_list()
        return [s.to_candidate() for s in students]

    async def get_student_by_id(self, student_id: str) -> CandidateStudent | None:
        try:
            oid = PydanticObjectId(student_id)
        except InvalidId:
            return None
        with _storage_errors("get_student_by_id"):
            student = await Student.get(oid)
        return student.to_candidate() if student else None

    async def get_student_by_admission_number(self, admission_number: str) -> CandidateStudent | None:
        with _storage_errors("get_student_by_admission_number"):
            student = await Student.find_one(Student.admission_number == admission_number)
        return student.to_candidate() if student else None

    async def load_reference_image(self, student: CandidateStudent) -> bytes:
        if not student.reference_image_key:
            raise StorageUnavailable(f"{student.name} has no reference photo on file.")
        try:
            return await fetch_reference_image(student.reference_image_key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Could not fetch reference photo {student.reference_image_key}: {e}")
            raise StorageUnavailable("Reference photo could not be loaded.", detail=str(e)) from e

    async def attendance_exists(self, student_id: str, subject_code: str, on_date: date) -> bool:
        with _storage_errors("attendance_exists"):
            existing = await AttendanceRecord.find_one(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.subject == subject_code,
                AttendanceRecord.date == on_date,
            )
        return existing is not None

    async def record_attendance(self, fact: AttendanceFact) -> AttendanceFact:
        record = AttendanceRecord.from_fact(fact)
        with _storage_errors("record_attendance"):
            try:
                await record.insert()
            except DuplicateKeyError as e:
                raise DuplicateRecord(fact.student_id, fact.subject, fact.date) from e
        return record.to_fact()

    async def list_subjects(self) -> list[SessionWindow]:
        with _storage_errors("list_subjects"):
            subjects = await Subject.find_all().sort("+position", "+created_at").to_list()
        windows = []
        for s in subjects:
            try:
                windows.append(s.to_window())
            except ValidationError as e:
                logger.warning(f"Skipping subject {s.code} with an invalid class window: {e}")
        return windows
