from datetime import date, datetime
from types import SimpleNamespace

import pytest

from eduface.services.stats import Scope, expected_headcount, overview_stats, percent, student_stats

TODAY = date(2025, 3, 10)


def student(id, department="Computer Science", year="1", approved=True, name=None):
    return SimpleNamespace(id=id, name=name or id, department=department, year=year, is_approved=approved)


def record(student_id, subject="CS101", on=TODAY, department="Computer Science", hour=9):
    return SimpleNamespace(
        student_id=student_id,
        subject=subject,
        date=on,
        department=department,
        timestamp=datetime(on.year, on.month, on.day, hour),
        status="PRESENT",
        verification_confidence=90.0,
    )


DEPARTMENTS = [
    SimpleNamespace(key="cse", name="Computer Science"),
    SimpleNamespace(key="ece", name="Electronics & Comm"),
]


@pytest.mark.parametrize("part, whole, expected", [(1, 3, 33), (2, 3, 67), (1, 8, 13), (0, 5, 0), (3, 0, 0)])
def test_percent_rounds_half_up(part, whole, expected):
    assert percent(part, whole) == expected


def test_overview_counts_approved_and_pending():
    students = [student("a"), student("b"), student("c", approved=False), student("d", department="Electronics & Comm")]
    records = [record("a"), record("d", department="Electronics & Comm"), record("b", on=date(2025, 3, 9))]

    stats = overview_stats(students, records, DEPARTMENTS, [], TODAY)

    assert stats["total_enrolled"] == 3
    assert stats["pending_approval"] == 1
    assert stats["present_today"] == 2
    assert stats["expected_headcount"] == 3
    assert stats["attendance_rate"] == 67
    assert stats["departments"] == [
        {"name": "CSE", "department": "Computer Science", "students": 2, "present": 2},
        {"name": "ECE", "department": "Electronics & Comm", "students": 1, "present": 1},
    ]


def test_class_configuration_overrides_headcount():
    configs = [
        SimpleNamespace(department="Computer Science", year="1", total_students=60),
        SimpleNamespace(department="Electronics & Comm", year="1", total_students=40),
    ]
    assert expected_headcount(3, configs, Scope()) == 100
    assert expected_headcount(3, configs, Scope(department="Computer Science")) == 60
    assert expected_headcount(3, [], Scope()) == 3


def test_hod_scope_hides_other_departments():
    students = [student("a"), student("d", department="Electronics & Comm")]
    records = [record("a"), record("d", department="Electronics & Comm")]

    stats = overview_stats(students, records, DEPARTMENTS, [], TODAY, Scope(department="Computer Science"))

    assert stats["total_enrolled"] == 1
    assert stats["present_today"] == 1
    assert [d["department"] for d in stats["departments"]] == ["Computer Science"]


def test_tutor_scope_limits_to_year():
    students = [student("a", year="1"), student("b", year="2")]
    records = [record("a"), record("b")]

    stats = overview_stats(students, records, DEPARTMENTS, [], TODAY, Scope(department="Computer Science", year="2"))

    assert stats["total_enrolled"] == 1
    assert stats["present_today"] == 1


def test_student_stats():
    alex = student("a", name="Alex")
    records = [
        record("a", on=date(2025, 3, 8)),
        record("b", on=date(2025, 3, 9)),
        record("a", subject="CS102", on=TODAY, hour=10),
        record("x", department="Electronics & Comm"),
    ]

    stats = student_stats(alex, records)

    assert stats["present"] == 2
    assert stats["total_classes"] == 3
    assert stats["absent"] == 1
    assert stats["percentage"] == 67
    assert [r["subject"] for r in stats["records"]] == ["CS102", "CS101"]


def test_student_stats_without_records():
    stats = student_stats(student("a"), [])
    assert stats["percentage"] == 0
    assert stats["records"] == []
