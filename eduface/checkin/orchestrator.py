"""Face-scan check-in state machine.

One :class:`CheckInSession` per kiosk interaction. A submitted frame runs the
strict sequence: active session -> candidate(s) -> face verification ->
duplicate check -> record. Nothing is persisted before the record step, so a
session can be cancelled at any earlier point without cleanup.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, Field

from eduface.checkin.clock import resolve_active_session
from eduface.checkin.errors import (
    AlreadyCheckedIn,
    CheckInError,
    DuplicateRecord,
    FaceNotRecognized,
    FailureReason,
    NoActiveSession,
    SessionBusy,
    SessionClosed,
    SessionNotFound,
    StorageUnavailable,
    VerificationSystemError,
)
from eduface.checkin.ledger import AttendanceLedger
from eduface.checkin.oracle import VerificationAdapter, VerificationResult
from eduface.checkin.resolver import DEFAULT_CANDIDATE_LIMIT, resolver_for
from eduface.checkin.schemas import AttendanceFact, AttendanceStatus, CandidateStudent, SessionWindow
from eduface.checkin.store import AttendanceStore

logger = logging.getLogger(__name__)


class CheckInState(str, Enum):
    AWAITING_CLAIM = "AWAITING_CLAIM"
    CAPTURING = "CAPTURING"
    VERIFYING = "VERIFYING"
    RESOLVING_DUPLICATE = "RESOLVING_DUPLICATE"
    RECORDING = "RECORDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


RETRYABLE = {
    FailureReason.FACE_NOT_RECOGNIZED,
    FailureReason.VERIFICATION_SYSTEM_ERROR,
    FailureReason.STORAGE_UNAVAILABLE,
}


class CheckInOutcome(BaseModel):
    state: CheckInState
    reason: Optional[FailureReason] = None
    message: str
    detail: Optional[str] = None
    retryable: bool = False
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    admission_number: Optional[str] = None
    confidence: Optional[float] = None
    subject_code: Optional[str] = None
    subject_name: Optional[str] = None
    record_id: Optional[str] = None
    checked_in_at: Optional[datetime] = None

    @property
    def severity(self) -> str:
        if self.state == CheckInState.SUCCESS:
            return "success"
        if self.reason == FailureReason.ALREADY_CHECKED_IN or self.state == CheckInState.CANCELLED:
            return "notice"
        return "error"


class CheckInSession(BaseModel):
    handle: str = Field(default_factory=lambda: uuid.uuid4().hex)
    claim: Optional[str] = None
    state: CheckInState = CheckInState.CAPTURING
    attempts: int = 0
    cancelled: bool = False
    in_flight: bool = False  # a frame is being processed
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    outcome: Optional[CheckInOutcome] = None

    @property
    def mode(self) -> str:
        return "claimed" if self.claim else "open"

    def move(self, state: CheckInState) -> None:
        self.state = state
        self.updated_at = datetime.now(timezone.utc)


class _Cancelled(Exception):
    pass


class CheckInOrchestrator:
    """Drives check-in sessions and owns the failure policy.

    Failures of a single candidate's comparison are absorbed while scanning;
    resolver and clock failures end the attempt before any oracle call; a
    failed record write is reported as-is and never retried automatically.
    """

    def __init__(
        self,
        store: AttendanceStore,
        verifier: VerificationAdapter,
        *,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
        fallback_to_first: bool = True,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] | None = None,
        session_ttl: timedelta = timedelta(minutes=10),
    ):
        self.store = store
        self.verifier = verifier
        self.ledger = AttendanceLedger(store)
        self.candidate_limit = candidate_limit
        self.fallback_to_first = fallback_to_first
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(self.tz))
        self.session_ttl = session_ttl
        self._sessions: dict[str, CheckInSession] = {}

    # ---- public surface ----

    async def start_check_in(self, claim: str | None = None) -> CheckInSession:
        self._prune()
        claim = claim.strip() if claim and claim.strip() else None
        session = CheckInSession(claim=claim)
        self._sessions[session.handle] = session
        if claim is None:
            return session

        session.move(CheckInState.AWAITING_CLAIM)
        try:
            await resolver_for(claim).resolve(self.store)
        except CheckInError as e:
            self._fail(session, e)
            return session
        session.move(CheckInState.CAPTURING)
        return session

    def get_session(self, handle: str) -> CheckInSession:
        session = self._sessions.get(handle)
        if session is None:
            raise SessionNotFound(handle)
        return session

    async def submit_frame(self, handle: str, image: bytes) -> CheckInOutcome:
        session = self.get_session(handle)
        if session.in_flight:
            raise SessionBusy(handle)
        if session.state == CheckInState.SUCCESS:
            raise SessionClosed(handle)
        if session.cancelled:
            return self._close_cancelled(session)

        # claimed before the first await so a concurrent frame sees it
        session.in_flight = True
        session.attempts += 1
        session.move(CheckInState.CAPTURING)
        try:
            return await self._run(session, image)
        except CheckInError as e:
            if session.cancelled:
                return self._close_cancelled(session)
            return self._fail(session, e)
        except _Cancelled:
            return self._close_cancelled(session)
        except (Exception, asyncio.CancelledError):
            session.move(CheckInState.FAILED)
            raise
        finally:
            session.in_flight = False

    def cancel(self, handle: str) -> CheckInSession:
        session = self.get_session(handle)
        if session.state in (CheckInState.RECORDING, CheckInState.SUCCESS):
            raise SessionClosed(handle)
        session.cancelled = True
        if not session.in_flight:
            self._close_cancelled(session)
        return session

    # ---- pipeline ----

    async def _run(self, session: CheckInSession, image: bytes) -> CheckInOutcome:
        now = self._clock()
        subject = resolve_active_session(
            now, await self.store.list_subjects(), fallback_to_first=self.fallback_to_first
        )
        if subject is None:
            raise NoActiveSession("No active classes found at this time.")

        candidates = await resolver_for(session.claim, self.candidate_limit).resolve(self.store)
        self._check_cancelled(session)

        session.move(CheckInState.VERIFYING)
        student, result = await self._verify(candidates, image)
        self._check_cancelled(session)

        session.move(CheckInState.RESOLVING_DUPLICATE)
        today = now.date()
        if await self.ledger.has_record(student.id, subject.code, today):
            raise self._already_checked_in(student, subject)
        self._check_cancelled(session)

        session.move(CheckInState.RECORDING)
        fact = AttendanceFact(
            student_id=student.id,
            student_name=student.name,
            department=student.department,
            subject=subject.code,
            date=today,
            timestamp=now,
            status=AttendanceStatus.PRESENT,
            verification_confidence=result.confidence,
        )
        try:
            saved = await self.ledger.record(fact)
        except DuplicateRecord:
            raise self._already_checked_in(student, subject)

        session.move(CheckInState.SUCCESS)
        outcome = CheckInOutcome(
            state=CheckInState.SUCCESS,
            message="Attendance Marked Successfully!",
            student_id=student.id,
            student_name=student.name,
            admission_number=student.admission_number,
            confidence=result.confidence,
            subject_code=subject.code,
            subject_name=subject.name,
            record_id=saved.id,
            checked_in_at=saved.timestamp,
        )
        session.outcome = outcome
        logger.info(
            f"Check-in {session.handle}: {student.name} present for {subject.code} "
            f"(confidence {result.confidence:g})"
        )
        return outcome

    async def _verify(
        self, candidates: Sequence[CandidateStudent], image: bytes
    ) -> tuple[CandidateStudent, VerificationResult]:
        """First confirmed match in candidate order wins."""
        errors: list[str] = []
        for candidate in candidates:
            try:
                reference = await self.store.load_reference_image(candidate)
            except StorageUnavailable as e:
                logger.warning(f"Reference photo unavailable for {candidate.admission_number}: {e.detail or e}")
                errors.append(e.message)
                continue

            result = await self.verifier.compare(reference, image)
            if result.is_match:
                return candidate, result
            if result.failed:
                logger.warning(f"Verification against {candidate.admission_number} failed: {result.explanation}")
                errors.append(result.explanation)

        if errors:
            raise VerificationSystemError(
                "The verification service could not complete the check. Please try again.",
                detail=errors[-1],
            )
        raise FaceNotRecognized("Face not recognized. Please remove glasses/masks and try again.")

    # ---- helpers ----

    @staticmethod
    def _already_checked_in(student: CandidateStudent, subject: SessionWindow) -> AlreadyCheckedIn:
        return AlreadyCheckedIn(
            f"Attendance already marked for {subject.name} today.", student=student, subject=subject
        )

    @staticmethod
    def _check_cancelled(session: CheckInSession) -> None:
        if session.cancelled:
            raise _Cancelled()

    def _fail(self, session: CheckInSession, error: CheckInError) -> CheckInOutcome:
        student = error.student
        subject = error.subject
        outcome = CheckInOutcome(
            state=CheckInState.FAILED,
            reason=error.reason,
            message=error.message,
            detail=error.detail,
            retryable=error.reason in RETRYABLE,
            student_id=student.id if student else None,
            student_name=student.name if student else None,
            admission_number=student.admission_number if student else None,
            subject_code=subject.code if subject else None,
            subject_name=subject.name if subject else None,
        )
        session.move(CheckInState.FAILED)
        session.outcome = outcome
        if error.reason == FailureReason.ALREADY_CHECKED_IN:
            logger.info(f"Check-in {session.handle}: {error.message}")
        else:
            logger.warning(f"Check-in {session.handle} failed with {error.reason.value}: {error.detail or error.message}")
        return outcome

    def _close_cancelled(self, session: CheckInSession) -> CheckInOutcome:
        session.move(CheckInState.CANCELLED)
        session.outcome = CheckInOutcome(state=CheckInState.CANCELLED, message="Check-in cancelled.")
        self._sessions.pop(session.handle, None)
        logger.info(f"Check-in {session.handle} cancelled")
        return session.outcome

    def _prune(self) -> None:
        cutoff = datetime.now(timezone.utc) - self.session_ttl
        stale = [
            h for h, s in self._sessions.items()
            if s.updated_at < cutoff and not s.in_flight
        ]
        for handle in stale:
            del self._sessions[handle]
