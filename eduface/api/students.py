"""Student registration, approval and profile management."""
from datetime import datetime

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from eduface.api.deps import AdminOnly, CurrentUser, scope_for
from eduface.models.attendance import AttendanceRecord
from eduface.models.student import Student, StudentSignup, StudentUpdate
from eduface.models.subject import Department
from eduface.models.user import User
from eduface.services.images import ALLOWED_TYPES, MAX_IMAGE_BYTES, InvalidImage, decode_data_url
from eduface.services.s3 import delete_reference_image, upload_reference_image
from eduface.services.stats import student_stats

router = APIRouter()
signup_router = APIRouter()


def _serialize(s: Student) -> dict:
    return {
        "id": str(s.id),
        "admission_number": s.admission_number,
        "name": s.name,
        "email": s.email,
        "department": s.department,
        "year": s.year,
        "section": s.section,
        "reference_image_url": s.reference_image_url,
        "has_reference_image": bool(s.reference_image_key),
        "is_approved": s.is_approved,
        "approved_at": s.approved_at.isoformat() if s.approved_at else None,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


async def _get_student(student_id: str, user: User) -> Student:
    try:
        s = await Student.get(PydanticObjectId(student_id))
    except InvalidId:
        s = None
    if not s:
        raise HTTPException(status_code=404, detail="Student not found")
    if not scope_for(user).includes_student(s):
        raise HTTPException(status_code=403, detail="Not authorized for this student")
    return s


@signup_router.post("/register", status_code=201)
async def register_student(data: StudentSignup):
    """Self-registration with a captured face photo; the account waits for admin approval."""
    admission_number = data.admission_number.strip()
    if await Student.find_one(Student.admission_number == admission_number):
        raise HTTPException(status_code=400, detail="Admission number already registered")
    if not await Department.find_one(Department.name == data.department):
        raise HTTPException(status_code=400, detail="Unknown department")
    try:
        body, content_type = decode_data_url(data.face_image)
    except InvalidImage as e:
        raise HTTPException(status_code=400, detail=str(e))

    url, key = await upload_reference_image(admission_number, body, content_type)
    s = Student(
        admission_number=admission_number,
        name=data.name.strip(),
        email=data.email,
        department=data.department,
        year=data.year,
        section=data.section,
        reference_image_key=key,
        reference_image_url=url,
    )
    await s.insert()
    return {"id": str(s.id), "admission_number": s.admission_number, "is_approved": s.is_approved}


@router.get("/")
async def list_students(
    user: CurrentUser,
    status: str | None = Query(None, enum=["pending", "approved"]),
    department: str | None = None,
    year: str | None = None,
    q: str | None = Query(None, description="Search by name or admission number"),
):
    query: dict = {}
    scope = scope_for(user)
    department = scope.department or department
    year = scope.year or year
    if department:
        query["department"] = department
    if year:
        query["year"] = year
    if status:
        query["is_approved"] = status == "approved"
    if q and q.strip():
        search = q.strip()
        query["$or"] = [
            {"name": {"$regex": search, "$options": "i"}},
            {"admission_number": {"$regex": search, "$options": "i"}},
        ]
    students = await Student.find(query).sort("-created_at").to_list()
    return [_serialize(s) for s in students]


@router.get("/{student_id}")
async def get_student(student_id: str, user: CurrentUser):
    return _serialize(await _get_student(student_id, user))


@router.get("/{student_id}/stats")
async def get_student_stats(student_id: str, user: CurrentUser):
    s = await _get_student(student_id, user)
    records = await AttendanceRecord.find(AttendanceRecord.department == s.department).to_list()
    return student_stats(s, records)


@router.post("/{student_id}/approve")
async def approve_student(student_id: str, admin: AdminOnly):
    s = await _get_student(student_id, admin)
    if not s.reference_image_key:
        raise HTTPException(status_code=400, detail="Student has no reference photo")
    s.is_approved = True
    s.approved_by = str(admin.id)
    s.approved_at = datetime.utcnow()
    s.updated_at = datetime.utcnow()
    await s.save()
    return _serialize(s)


@router.post("/{student_id}/reject", status_code=204)
async def reject_student(student_id: str, admin: AdminOnly):
    """Reject a pending registration: the record and its photo are removed."""
    s = await _get_student(student_id, admin)
    if s.is_approved:
        raise HTTPException(status_code=400, detail="Student is already approved; delete instead")
    await _delete_with_photo(s)


@router.patch("/{student_id}")
async def update_student(student_id: str, data: StudentUpdate, user: CurrentUser):
    s = await _get_student(student_id, user)
    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    await s.save()
    return _serialize(s)


@router.put("/{student_id}/photo")
async def replace_photo(student_id: str, user: CurrentUser, file: UploadFile = File(...)):
    """Replace the reference photo used for face verification."""
    s = await _get_student(student_id, user)
    content_type = file.content_type or "image/jpeg"
    if content_type not in ALLOWED_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {content_type}")
    body = await file.read()
    if not body or len(body) > MAX_IMAGE_BYTES:
        raise HTTPException(status_code=400, detail="Image is empty or too large")
    old_key = s.reference_image_key
    s.reference_image_url, s.reference_image_key = await upload_reference_image(s.admission_number, body, content_type)
    s.updated_at = datetime.utcnow()
    await s.save()
    if old_key:
        await delete_reference_image(old_key)
    return _serialize(s)


@router.delete("/{student_id}", status_code=204)
async def delete_student(student_id: str, admin: AdminOnly):
    """Delete a student together with all of their attendance records."""
    s = await _get_student(student_id, admin)
    await _delete_with_photo(s)


async def _delete_with_photo(s: Student) -> None:
    await AttendanceRecord.find(AttendanceRecord.student_id == str(s.id)).delete()
    key = s.reference_image_key
    await s.delete()
    if key:
        await delete_reference_image(key)
