"""EduFace Attendance - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import ServerSelectionTimeoutError

from eduface.config import settings
from eduface.db import db_shutdown, db_startup
from eduface.seed import seed_admin, seed_catalog
from eduface.api import auth, users, students, checkin, attendance, subjects, classes, dashboard
from eduface.api.deps import require_module_permission

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
        await seed_admin()
        await seed_catalog()
    except ServerSelectionTimeoutError as e:
        logger.error(
            "MongoDB is not running. Start it with: docker compose up -d (from project root)"
        )
        raise RuntimeError(
            "MongoDB connection failed. Start MongoDB (e.g. docker compose up -d)."
        ) from e
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description=f"Face-scan attendance check-in for {settings.college_name}",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Public: staff login, student self-registration, kiosk check-in
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(students.signup_router, prefix="/api/students", tags=["Registration"])
app.include_router(checkin.router, prefix="/api/checkin", tags=["Check-in"])

# Staff
app.include_router(users.router, prefix="/api/users", tags=["Staff Users"], dependencies=[Depends(require_module_permission("users"))])
app.include_router(students.router, prefix="/api/students", tags=["Students"], dependencies=[Depends(require_module_permission("students"))])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"], dependencies=[Depends(require_module_permission("attendance"))])
app.include_router(subjects.router, prefix="/api/subjects", tags=["Subjects"], dependencies=[Depends(require_module_permission("subjects"))])
app.include_router(classes.router, prefix="/api/classes", tags=["Class Configuration"], dependencies=[Depends(require_module_permission("classes"))])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"], dependencies=[Depends(require_module_permission("dashboard"))])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
