import pytest

from eduface.checkin.errors import ClaimNotEligible, ClaimNotFound, NoEligibleStudents
from eduface.checkin.resolver import ClaimedIdentityResolver, OpenCandidateResolver, resolver_for

from conftest import InMemoryStore, make_student


class TestClaimedMode:
    async def test_returns_the_claimed_student(self, store, alex):
        candidates = await ClaimedIdentityResolver(" ADM001 ").resolve(store)
        assert candidates == [alex]

    async def test_unknown_admission_number(self, store):
        with pytest.raises(ClaimNotFound) as exc:
            await ClaimedIdentityResolver("ADM404").resolve(store)
        assert "ADM404" in exc.value.message

    async def test_unapproved_student_is_not_eligible(self):
        store = InMemoryStore(students=[make_student(2, name="Pat", approved=False)])
        with pytest.raises(ClaimNotEligible) as exc:
            await ClaimedIdentityResolver("ADM002").resolve(store)
        assert "awaiting approval" in exc.value.message

    async def test_student_without_photo_is_not_eligible(self):
        store = InMemoryStore(students=[make_student(3, name="Sam", photo=False)])
        with pytest.raises(ClaimNotEligible) as exc:
            await ClaimedIdentityResolver("ADM003").resolve(store)
        assert "no reference photo" in exc.value.message


class TestOpenCandidateMode:
    async def test_newest_eligible_students_first_bounded_by_limit(self):
        students = [make_student(n) for n in range(1, 6)]
        store = InMemoryStore(students=students)
        candidates = await OpenCandidateResolver(limit=3).resolve(store)
        assert [c.id for c in candidates] == ["stu-5", "stu-4", "stu-3"]

    async def test_skips_ineligible_students(self):
        students = [
            make_student(1),
            make_student(2, approved=False),
            make_student(3, photo=False),
        ]
        candidates = await OpenCandidateResolver().resolve(InMemoryStore(students=students))
        assert [c.id for c in candidates] == ["stu-1"]

    async def test_fewer_students_than_limit(self):
        store = InMemoryStore(students=[make_student(1), make_student(2)])
        candidates = await OpenCandidateResolver(limit=3).resolve(store)
        assert len(candidates) == 2

    async def test_no_eligible_students(self):
        store = InMemoryStore(students=[make_student(1, approved=False)])
        with pytest.raises(NoEligibleStudents):
            await OpenCandidateResolver().resolve(store)

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            OpenCandidateResolver(limit=0)


def test_resolver_for_picks_mode_from_claim():
    assert isinstance(resolver_for("ADM001"), ClaimedIdentityResolver)
    assert isinstance(resolver_for(None), OpenCandidateResolver)
    assert isinstance(resolver_for("   "), OpenCandidateResolver)
    assert resolver_for(None, candidate_limit=5).limit == 5
