"""Request-scoped snapshots the check-in core works on.

The core never touches ODM documents directly: the storage collaborator copies
what it needs into these plain models for the duration of one attempt.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"


def parse_time(value: str) -> tuple[int, int]:
    """(hour, minute) of an "HH:MM" time-of-day string."""
    hour, _, minute = value.strip().partition(":")
    try:
        h, m = int(hour), int(minute or 0)
    except ValueError:
        raise ValueError(f"Invalid time of day: {value!r}")
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time of day: {value!r}")
    return h, m


def parse_hour(value: str) -> int:
    return parse_time(value)[0]


class CandidateStudent(BaseModel):
    id: str
    admission_number: str
    name: str
    department: str
    year: str = ""
    section: str = ""
    reference_image_key: Optional[str] = None
    is_approved: bool = False
    created_at: datetime

    @property
    def is_eligible(self) -> bool:
        return self.is_approved and bool(self.reference_image_key)


class SessionWindow(BaseModel):
    """A subject's recurring class window, compared at hour granularity."""

    id: str
    name: str
    code: str
    department: str
    start_time: str  # HH:MM
    end_time: str  # HH:MM

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        parse_time(value)
        return value

    @model_validator(mode="after")
    def _check_order(self):
        if parse_time(self.start_time) >= parse_time(self.end_time):
            raise ValueError(f"Subject {self.code}: start_time must be before end_time")
        return self

    @property
    def start_hour(self) -> int:
        return parse_hour(self.start_time)

    @property
    def end_hour(self) -> int:
        return parse_hour(self.end_time)


class AttendanceFact(BaseModel):
    """One verified check-in, name and department captured at write time."""

    id: Optional[str] = None
    student_id: str
    student_name: str
    department: str
    subject: str
    date: date
    timestamp: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT
    verification_confidence: float = Field(ge=0, le=100)
