"""At-most-once attendance per student, subject and day."""
from __future__ import annotations

import logging
from datetime import date

from eduface.checkin.errors import DuplicateRecord
from eduface.checkin.schemas import AttendanceFact
from eduface.checkin.store import AttendanceStore

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Sole authority deciding whether a check-in is accepted.

    ``has_record`` is only a cheap early exit; ``record`` relies on the store's
    unique (student, subject, date) constraint, so two stations racing on the
    same student still produce a single record.
    """

    def __init__(self, store: AttendanceStore):
        self.store = store

    async def has_record(self, student_id: str, subject_code: str, on_date: date) -> bool:
        return await self.store.attendance_exists(student_id, subject_code, on_date)

    async def record(self, fact: AttendanceFact) -> AttendanceFact:
        try:
            saved = await self.store.record_attendance(fact)
        except DuplicateRecord:
            logger.info(f"Duplicate check-in rejected for {fact.student_id} in {fact.subject} on {fact.date}")
            raise
        logger.info(f"Recorded {fact.status.value} for {fact.student_name} in {fact.subject} on {fact.date}")
        return saved
