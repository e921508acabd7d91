"""Identity resolution: which student(s) a captured frame is checked against."""
from __future__ import annotations

from abc import ABC, abstractmethod

from eduface.checkin.errors import ClaimNotEligible, ClaimNotFound, NoEligibleStudents
from eduface.checkin.schemas import CandidateStudent
from eduface.checkin.store import AttendanceStore

DEFAULT_CANDIDATE_LIMIT = 3


class IdentityResolver(ABC):
    claimed: bool = False

    @abstractmethod
    async def resolve(self, store: AttendanceStore) -> list[CandidateStudent]:
        """Ordered candidates to verify; raises a CheckInError when there are none."""


class ClaimedIdentityResolver(IdentityResolver):
    """The user typed an admission number: exactly one candidate."""

    claimed = True

    def __init__(self, admission_number: str):
        self.admission_number = admission_number.strip()

    async def resolve(self, store: AttendanceStore) -> list[CandidateStudent]:
        student = await store.get_student_by_admission_number(self.admission_number)
        if student is None:
            raise ClaimNotFound(f"No student is registered with admission number {self.admission_number}.")
        if not student.is_approved:
            raise ClaimNotEligible(f"{student.name}'s registration is still awaiting approval.")
        if not student.reference_image_key:
            raise ClaimNotEligible(f"{student.name} has no reference photo on file.")
        return [student]


class OpenCandidateResolver(IdentityResolver):
    """No claim: scan the most recently registered eligible students.

    Only the newest ``limit`` students are tried, so a student registered
    before them is never recognized in this mode.
    """

    def __init__(self, limit: int = DEFAULT_CANDIDATE_LIMIT):
        if limit < 1:
            raise ValueError("candidate limit must be at least 1")
        self.limit = limit

    async def resolve(self, store: AttendanceStore) -> list[CandidateStudent]:
        students = [s for s in await store.list_eligible_students() if s.is_eligible]
        if not students:
            raise NoEligibleStudents("No approved students in database.")
        # newest first; ties keep reverse registration order
        ranked = sorted(reversed(students), key=lambda s: s.created_at, reverse=True)
        return ranked[: self.limit]


def resolver_for(claim: str | None, candidate_limit: int = DEFAULT_CANDIDATE_LIMIT) -> IdentityResolver:
    if claim and claim.strip():
        return ClaimedIdentityResolver(claim)
    return OpenCandidateResolver(candidate_limit)
