from datetime import date, datetime
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from eduface.checkin.schemas import AttendanceFact, AttendanceStatus


class AttendanceRecord(Document):
    """One verified check-in. Never updated; removed only with its student."""
    student_id: Indexed(str)
    student_name: str  # snapshot at check-in time
    department: str  # snapshot at check-in time
    subject: str  # subject code
    date: Indexed(date)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    status: AttendanceStatus = AttendanceStatus.PRESENT
    verification_confidence: float = Field(ge=0, le=100)

    class Settings:
        name = "attendance"
        indexes = [
            IndexModel(
                [("student_id", ASCENDING), ("subject", ASCENDING), ("date", ASCENDING)],
                unique=True,
                name="uniq_student_subject_date",
            ),
        ]

    @classmethod
    def from_fact(cls, fact: AttendanceFact) -> "AttendanceRecord":
        return cls(**fact.model_dump(exclude={"id"}))

    def to_fact(self) -> AttendanceFact:
        return AttendanceFact(id=str(self.id), **self.model_dump(include=set(AttendanceFact.model_fields) - {"id"}))
