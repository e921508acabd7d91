"""Departments and subjects with their daily class window."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field, model_validator
from pymongo import ASCENDING, IndexModel

from eduface.checkin.schemas import SessionWindow, parse_time


class Department(Document):
    key: Indexed(str, unique=True)  # e.g. "cse"
    name: str  # e.g. "Computer Science"

    class Settings:
        name = "departments"


class Subject(Document):
    """A recurring class; ``code`` is unique within its department."""

    name: str
    code: str
    department: str
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    position: int = 0  # list order; first subject is the fallback session
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "subjects"
        indexes = [
            IndexModel([("department", ASCENDING), ("code", ASCENDING)], unique=True, name="uniq_department_code"),
        ]

    def to_window(self) -> SessionWindow:
        return SessionWindow(
            id=str(self.id),
            name=self.name,
            code=self.code,
            department=self.department,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class SubjectCreate(BaseModel):
    name: str
    code: str
    department: str
    start_time: str
    end_time: str
    position: Optional[int] = None

    @model_validator(mode="after")
    def _check_window(self):
        if parse_time(self.start_time) >= parse_time(self.end_time):
            raise ValueError("start_time must be before end_time")
        return self
