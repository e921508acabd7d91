"""Typed failures raised inside the check-in core."""
from enum import Enum


class FailureReason(str, Enum):
    NO_ACTIVE_SESSION = "NoActiveSession"
    CLAIM_NOT_FOUND = "ClaimNotFound"
    CLAIM_NOT_ELIGIBLE = "ClaimNotEligible"
    NO_ELIGIBLE_STUDENTS = "NoEligibleStudents"
    FACE_NOT_RECOGNIZED = "FaceNotRecognized"
    VERIFICATION_SYSTEM_ERROR = "VerificationSystemError"
    ALREADY_CHECKED_IN = "AlreadyCheckedIn"
    STORAGE_UNAVAILABLE = "StorageUnavailable"


class CheckInError(Exception):
    """Terminal failure of one check-in attempt."""

    reason: FailureReason

    def __init__(self, message: str, detail: str | None = None, *, student=None, subject=None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.student = student
        self.subject = subject


class NoActiveSession(CheckInError):
    reason = FailureReason.NO_ACTIVE_SESSION


class ClaimNotFound(CheckInError):
    reason = FailureReason.CLAIM_NOT_FOUND


class ClaimNotEligible(CheckInError):
    reason = FailureReason.CLAIM_NOT_ELIGIBLE


class NoEligibleStudents(CheckInError):
    reason = FailureReason.NO_ELIGIBLE_STUDENTS


class FaceNotRecognized(CheckInError):
    reason = FailureReason.FACE_NOT_RECOGNIZED


class VerificationSystemError(CheckInError):
    reason = FailureReason.VERIFICATION_SYSTEM_ERROR


class AlreadyCheckedIn(CheckInError):
    reason = FailureReason.ALREADY_CHECKED_IN


class StorageUnavailable(CheckInError):
    reason = FailureReason.STORAGE_UNAVAILABLE


class DuplicateRecord(Exception):
    """The store already holds a record for (student, subject, date)."""

    def __init__(self, student_id: str, subject: str, on_date):
        super().__init__(f"Attendance already recorded for {student_id} / {subject} / {on_date}")
        self.student_id = student_id
        self.subject = subject
        self.date = on_date


class SessionNotFound(Exception):
    """Unknown or expired check-in handle."""


class SessionBusy(Exception):
    """A frame is already being verified for this handle."""


class SessionClosed(Exception):
    """The session already recorded attendance and cannot change."""
