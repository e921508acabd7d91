"""Seed the default admin, departments and subjects if not present."""
import logging

from eduface.api.deps import get_password_hash
from eduface.checkin.clock import find_overlapping_windows
from eduface.config import settings
from eduface.models.subject import Department, Subject
from eduface.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS = [
    {"key": "cse", "name": "Computer Science"},
    {"key": "ece", "name": "Electronics & Comm"},
    {"key": "mech", "name": "Mechanical Eng"},
    {"key": "civil", "name": "Civil Eng"},
]

DEFAULT_SUBJECTS = [
    {"name": "Data Structures", "code": "CS101", "department": "Computer Science", "start_time": "09:00", "end_time": "10:00"},
    {"name": "Algorithms", "code": "CS102", "department": "Computer Science", "start_time": "10:00", "end_time": "11:00"},
    {"name": "Digital Circuits", "code": "EC201", "department": "Electronics & Comm", "start_time": "09:00", "end_time": "10:00"},
]


async def seed_admin():
    existing = await User.find_one(User.email == settings.admin_email)
    if existing:
        return
    await User(
        email=settings.admin_email,
        hashed_password=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        full_name=settings.admin_full_name,
    ).insert()


async def seed_catalog():
    if await Department.count() == 0:
        for d in DEFAULT_DEPARTMENTS:
            await Department(**d).insert()
    if await Subject.count() == 0:
        for position, s in enumerate(DEFAULT_SUBJECTS):
            await Subject(position=position, **s).insert()
    await warn_overlapping_subjects()


async def warn_overlapping_subjects():
    """Overlapping windows resolve to whichever subject is listed first."""
    subjects = await Subject.find_all().sort("+position", "+created_at").to_list()
    windows = [s.to_window() for s in subjects]
    for a, b in find_overlapping_windows(windows):
        logger.warning(
            f"{a.code} ({a.start_time}-{a.end_time}) overlaps {b.code} ({b.start_time}-{b.end_time}); "
            f"check-ins during the overlap are recorded for {a.code}"
        )
