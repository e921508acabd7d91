"""Beanie document models and Pydantic schemas."""
from eduface.models.user import User, UserRole, UserCreate
from eduface.models.student import Student, StudentSignup, StudentUpdate
from eduface.models.subject import Department, Subject, SubjectCreate
from eduface.models.attendance import AttendanceRecord
from eduface.models.class_config import ClassConfiguration, ClassConfigurationUpdate

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "Student",
    "StudentSignup",
    "StudentUpdate",
    "Department",
    "Subject",
    "SubjectCreate",
    "AttendanceRecord",
    "ClassConfiguration",
    "ClassConfigurationUpdate",
]
