"""Kiosk face-scan check-in: start a session, submit captured frames, cancel."""
from datetime import datetime, timedelta
from typing import Annotated, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from eduface.checkin import (
    CheckInOrchestrator,
    CheckInOutcome,
    CheckInSession,
    CheckInState,
    SessionBusy,
    SessionClosed,
    SessionNotFound,
    StorageUnavailable,
    VerificationAdapter,
    resolve_active_session,
)
from eduface.config import settings
from eduface.models.attendance import AttendanceRecord
from eduface.models.student import Student
from eduface.services.attendance_store import MongoAttendanceStore
from eduface.services.gemini import build_oracle
from eduface.services.images import InvalidImage, decode_data_url
from eduface.services.stats import student_stats

router = APIRouter()

_orchestrator: CheckInOrchestrator | None = None


def get_orchestrator() -> CheckInOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        verifier = VerificationAdapter(
            build_oracle(settings),
            threshold=settings.verification_match_threshold,
            timeout=settings.verification_timeout_seconds,
        )
        _orchestrator = CheckInOrchestrator(
            MongoAttendanceStore(),
            verifier,
            candidate_limit=settings.open_candidate_limit,
            fallback_to_first=settings.session_fallback_to_first,
            tz=ZoneInfo(settings.campus_timezone),
            session_ttl=timedelta(seconds=settings.checkin_session_ttl_seconds),
        )
    return _orchestrator


Orchestrator = Annotated[CheckInOrchestrator, Depends(get_orchestrator)]


class StartRequest(BaseModel):
    admission_number: Optional[str] = None


class FrameRequest(BaseModel):
    image: str  # data URL from the camera capture


def _session_payload(session: CheckInSession) -> dict:
    return {
        "handle": session.handle,
        "mode": session.mode,
        "state": session.state.value,
        "attempts": session.attempts,
        "cancel_requested": session.cancelled,
        "outcome": _outcome_payload(session.outcome) if session.outcome else None,
    }


def _outcome_payload(outcome: CheckInOutcome) -> dict:
    payload = outcome.model_dump(mode="json", exclude_none=True)
    payload["severity"] = outcome.severity
    return payload


@router.get("/active-session")
async def active_session(orchestrator: Orchestrator):
    """The class a check-in made right now would be recorded for."""
    now = datetime.now(orchestrator.tz)
    try:
        subjects = await orchestrator.store.list_subjects()
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    subject = resolve_active_session(now, subjects, fallback_to_first=orchestrator.fallback_to_first)
    if subject is None:
        return {"active": False, "subject": None}
    return {"active": True, "subject": subject.model_dump()}


@router.post("/sessions", status_code=201)
async def start_check_in(data: StartRequest, orchestrator: Orchestrator):
    session = await orchestrator.start_check_in(data.admission_number)
    return _session_payload(session)


@router.get("/sessions/{handle}")
async def get_check_in(handle: str, orchestrator: Orchestrator):
    try:
        session = orchestrator.get_session(handle)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Check-in session not found or expired")
    return _session_payload(session)


@router.post("/sessions/{handle}/frames")
async def submit_frame(handle: str, data: FrameRequest, orchestrator: Orchestrator):
    try:
        image, _ = decode_data_url(data.image)
    except InvalidImage as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        outcome = await orchestrator.submit_frame(handle, image)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Check-in session not found or expired")
    except SessionBusy:
        raise HTTPException(status_code=409, detail="A frame is already being verified for this session")
    except SessionClosed:
        raise HTTPException(status_code=409, detail="Attendance was already recorded for this session")
    return _outcome_payload(outcome)


@router.delete("/sessions/{handle}")
async def cancel_check_in(handle: str, orchestrator: Orchestrator):
    try:
        session = orchestrator.cancel(handle)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Check-in session not found or expired")
    except SessionClosed:
        raise HTTPException(status_code=409, detail="Attendance is already recorded and cannot be cancelled")
    return _session_payload(session)


@router.get("/sessions/{handle}/dashboard")
async def checked_in_dashboard(handle: str, orchestrator: Orchestrator):
    """Attendance summary for the student a successful session checked in."""
    try:
        session = orchestrator.get_session(handle)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Check-in session not found or expired")
    outcome = session.outcome
    if session.state != CheckInState.SUCCESS or outcome is None or not outcome.student_id:
        raise HTTPException(status_code=409, detail="No successful check-in for this session")
    student = await Student.find_one(Student.admission_number == outcome.admission_number)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    records = await AttendanceRecord.find(AttendanceRecord.department == student.department).to_list()
    return student_stats(student, records)
