from datetime import datetime

from fastapi import APIRouter, HTTPException

from eduface.api.deps import CurrentUser, scope_for
from eduface.models.class_config import ClassConfiguration, ClassConfigurationUpdate

router = APIRouter()


def _serialize(c: ClassConfiguration) -> dict:
    return {
        "id": str(c.id),
        "department": c.department,
        "year": c.year,
        "total_students": c.total_students,
        "updated_by": c.updated_by,
        "updated_at": c.updated_at.isoformat(),
    }


@router.get("/")
async def list_class_configurations(user: CurrentUser):
    scope = scope_for(user)
    configs = await ClassConfiguration.find_all().sort("+department", "+year").to_list()
    return [_serialize(c) for c in configs if scope.includes_config(c)]


@router.get("/{department}/{year}")
async def get_class_configuration(department: str, year: str, user: CurrentUser):
    config = await ClassConfiguration.find_one(
        ClassConfiguration.department == department,
        ClassConfiguration.year == year,
    )
    if not config:
        raise HTTPException(status_code=404, detail="Class configuration not found")
    if not scope_for(user).includes_config(config):
        raise HTTPException(status_code=403, detail="Not authorized for this class")
    return _serialize(config)


@router.put("/")
async def upsert_class_configuration(data: ClassConfigurationUpdate, user: CurrentUser):
    """Set the expected head-count for a class; HODs and tutors only for their own."""
    if not scope_for(user).includes_config(data):
        raise HTTPException(status_code=403, detail="Not authorized for this class")
    config = await ClassConfiguration.find_one(
        ClassConfiguration.department == data.department,
        ClassConfiguration.year == data.year,
    )
    if config is None:
        config = ClassConfiguration(**data.model_dump())
    else:
        config.total_students = data.total_students
    config.updated_by = str(user.id)
    config.updated_at = datetime.utcnow()
    await config.save()
    return _serialize(config)
