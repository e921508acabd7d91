"""Departments and the subject timetable that drives active-session resolution."""
import logging

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from eduface.api.deps import AdminOnly, CurrentUser
from eduface.checkin.clock import find_overlapping_windows
from eduface.models.subject import Department, Subject, SubjectCreate

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize(s: Subject) -> dict:
    return {
        "id": str(s.id),
        "name": s.name,
        "code": s.code,
        "department": s.department,
        "start_time": s.start_time,
        "end_time": s.end_time,
        "position": s.position,
    }


@router.get("/departments")
async def list_departments(user: CurrentUser):
    departments = await Department.find_all().sort("+key").to_list()
    return [{"id": str(d.id), "key": d.key, "name": d.name} for d in departments]


@router.get("/")
async def list_subjects(user: CurrentUser, department: str | None = None):
    query = {"department": department} if department else {}
    subjects = await Subject.find(query).sort("+position", "+created_at").to_list()
    return [_serialize(s) for s in subjects]


@router.post("/", status_code=201)
async def create_subject(data: SubjectCreate, admin: AdminOnly):
    if not await Department.find_one(Department.name == data.department):
        raise HTTPException(status_code=400, detail="Unknown department")
    existing = await Subject.find_all().sort("+position", "+created_at").to_list()
    position = data.position
    if position is None:
        position = max((s.position for s in existing), default=-1) + 1
    subject = Subject(**data.model_dump(exclude={"position"}), position=position)
    try:
        await subject.insert()
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail=f"Subject {data.code} already exists in {data.department}")

    windows = []
    for s in sorted([*existing, subject], key=lambda s: (s.position, s.created_at)):
        try:
            windows.append(s.to_window())
        except ValidationError:
            continue
    overlaps = [
        {"first": a.code, "second": b.code}
        for a, b in find_overlapping_windows(windows)
        if subject.code in (a.code, b.code)
    ]
    for o in overlaps:
        logger.warning(f"Subject {o['first']} overlaps {o['second']}; {o['first']} wins during the overlap")
    return {**_serialize(subject), "overlaps": overlaps}


@router.delete("/{subject_id}", status_code=204)
async def delete_subject(subject_id: str, admin: AdminOnly):
    try:
        subject = await Subject.get(PydanticObjectId(subject_id))
    except InvalidId:
        subject = None
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    await subject.delete()
