"""Registered students and their reference photo."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field

from eduface.checkin.schemas import CandidateStudent


class Student(Document):
    """Self-registered student; only approved students with a photo can check in."""

    admission_number: Indexed(str, unique=True)
    name: str
    email: Optional[EmailStr] = None
    department: Indexed(str)
    year: str
    section: str = ""

    reference_image_key: Optional[str] = None  # S3 key of the enrollment photo
    reference_image_url: Optional[str] = None

    is_approved: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "students"
        use_state_management = True

    def to_candidate(self) -> CandidateStudent:
        return CandidateStudent(
            id=str(self.id),
            admission_number=self.admission_number,
            name=self.name,
            department=self.department,
            year=self.year,
            section=self.section,
            reference_image_key=self.reference_image_key,
            is_approved=self.is_approved,
            created_at=self.created_at,
        )


class StudentSignup(BaseModel):
    """Registration form; ``face_image`` is the captured photo as a data URL."""

    admission_number: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    department: str
    year: str
    section: str = ""
    face_image: str


class StudentUpdate(BaseModel):
    """All fields optional for PATCH; admission_number is not updatable."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    year: Optional[str] = None
    section: Optional[str] = None
