from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel


class ClassConfiguration(Document):
    """Target head-count for a (department, year), used for attendance rates."""

    department: str
    year: str
    total_students: int = Field(ge=0)
    updated_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "class_configurations"
        indexes = [
            IndexModel([("department", ASCENDING), ("year", ASCENDING)], unique=True, name="uniq_department_year"),
        ]


class ClassConfigurationUpdate(BaseModel):
    department: str
    year: str
    total_students: int = Field(ge=0)
