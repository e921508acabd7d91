"""Staff accounts - admins create HOD and tutor logins."""
from datetime import datetime

from beanie import PydanticObjectId
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from eduface.api.deps import AdminOnly, get_password_hash
from eduface.models.user import User, UserCreate, UserRole

router = APIRouter()


class PasswordUpdate(BaseModel):
    password: str


@router.get("/")
async def list_users(admin: AdminOnly):
    users = await User.find_all().to_list()
    return [
        {
            "id": str(u.id),
            "email": u.email,
            "role": u.role,
            "full_name": u.full_name,
            "department": u.department,
            "year": u.year,
            "is_active": u.is_active,
        }
        for u in users
    ]


@router.post("/", status_code=201)
async def create_user(data: UserCreate, admin: AdminOnly):
    if data.role in (UserRole.HOD, UserRole.TUTOR) and not data.department:
        raise HTTPException(status_code=400, detail="Department is required for HOD and tutor accounts")
    if data.role == UserRole.TUTOR and not data.year:
        raise HTTPException(status_code=400, detail="Year is required for tutor accounts")
    existing = await User.find_one(User.email == data.email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    u = User(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        role=data.role,
        full_name=data.full_name,
        department=data.department,
        year=data.year,
    )
    await u.insert()
    return {"id": str(u.id), "email": u.email, "role": u.role}


@router.post("/{user_id}/set-password")
async def set_user_password(user_id: str, data: PasswordUpdate, admin: AdminOnly):
    """Set or reset a user's password (admin-only)."""
    u = await User.get(PydanticObjectId(user_id))
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    u.hashed_password = get_password_hash(data.password)
    u.updated_at = datetime.utcnow()
    await u.save()
    return {"id": str(u.id)}


@router.delete("/{user_id}", status_code=204)
async def deactivate_user(user_id: str, admin: AdminOnly):
    """Deactivate a staff login (soft delete)."""
    u = await User.get(PydanticObjectId(user_id))
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    if str(u.id) == str(admin.id):
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    u.is_active = False
    u.updated_at = datetime.utcnow()
    await u.save()
