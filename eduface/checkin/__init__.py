"""Face-scan attendance check-in core."""
from eduface.checkin.clock import find_overlapping_windows, resolve_active_session
from eduface.checkin.errors import (
    CheckInError,
    DuplicateRecord,
    FailureReason,
    SessionBusy,
    SessionClosed,
    SessionNotFound,
    StorageUnavailable,
)
from eduface.checkin.ledger import AttendanceLedger
from eduface.checkin.oracle import (
    MATCH_THRESHOLD,
    FaceComparisonOracle,
    OracleResponse,
    VerificationAdapter,
    VerificationResult,
)
from eduface.checkin.orchestrator import CheckInOrchestrator, CheckInOutcome, CheckInSession, CheckInState
from eduface.checkin.resolver import ClaimedIdentityResolver, IdentityResolver, OpenCandidateResolver, resolver_for
from eduface.checkin.schemas import AttendanceFact, AttendanceStatus, CandidateStudent, SessionWindow
from eduface.checkin.store import AttendanceStore

__all__ = [
    "find_overlapping_windows",
    "resolve_active_session",
    "CheckInError",
    "DuplicateRecord",
    "FailureReason",
    "SessionBusy",
    "SessionClosed",
    "SessionNotFound",
    "StorageUnavailable",
    "AttendanceLedger",
    "MATCH_THRESHOLD",
    "FaceComparisonOracle",
    "OracleResponse",
    "VerificationAdapter",
    "VerificationResult",
    "CheckInOrchestrator",
    "CheckInOutcome",
    "CheckInSession",
    "CheckInState",
    "ClaimedIdentityResolver",
    "IdentityResolver",
    "OpenCandidateResolver",
    "resolver_for",
    "AttendanceFact",
    "AttendanceStatus",
    "CandidateStudent",
    "SessionWindow",
    "AttendanceStore",
]
