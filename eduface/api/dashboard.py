from datetime import datetime
from typing import Any, Dict
from zoneinfo import ZoneInfo

from fastapi import APIRouter

from eduface.api.deps import CurrentUser, scope_for
from eduface.config import settings
from eduface.models.attendance import AttendanceRecord
from eduface.models.class_config import ClassConfiguration
from eduface.models.student import Student
from eduface.models.subject import Department
from eduface.services.stats import overview_stats

router = APIRouter()


@router.get("/stats")
async def get_dashboard_stats(user: CurrentUser) -> Dict[str, Any]:
    """Enrolment, pending approvals and today's attendance rate for the caller's scope."""
    today = datetime.now(ZoneInfo(settings.campus_timezone)).date()
    students = await Student.find_all().to_list()
    records = await AttendanceRecord.find(AttendanceRecord.date == today).to_list()
    departments = await Department.find_all().sort("+key").to_list()
    configs = await ClassConfiguration.find_all().to_list()
    return overview_stats(students, records, departments, configs, today, scope_for(user))
