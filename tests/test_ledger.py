from datetime import datetime

import pytest

from eduface.checkin.errors import DuplicateRecord
from eduface.checkin.ledger import AttendanceLedger
from eduface.checkin.schemas import AttendanceFact, AttendanceStatus

from conftest import InMemoryStore


def fact(student_id="stu-1", subject="CS101", when=datetime(2025, 3, 10, 9, 15)):
    return AttendanceFact(
        student_id=student_id,
        student_name="Alex",
        department="Computer Science",
        subject=subject,
        date=when.date(),
        timestamp=when,
        verification_confidence=92,
    )


async def test_record_then_has_record(today):
    ledger = AttendanceLedger(InMemoryStore())
    assert not await ledger.has_record("stu-1", "CS101", today)

    saved = await ledger.record(fact())

    assert saved.id
    assert saved.status == AttendanceStatus.PRESENT
    assert await ledger.has_record("stu-1", "CS101", today)


async def test_second_record_for_same_day_is_rejected():
    store = InMemoryStore()
    ledger = AttendanceLedger(store)
    await ledger.record(fact())

    with pytest.raises(DuplicateRecord):
        await ledger.record(fact(when=datetime(2025, 3, 10, 9, 40)))
    assert len(store.records) == 1


async def test_other_subject_or_day_is_a_new_record():
    store = InMemoryStore()
    ledger = AttendanceLedger(store)
    await ledger.record(fact())
    await ledger.record(fact(subject="CS102"))
    await ledger.record(fact(when=datetime(2025, 3, 11, 9, 15)))
    assert len(store.records) == 3
