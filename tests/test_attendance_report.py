from datetime import datetime
from zoneinfo import ZoneInfo

from eduface.api.attendance import REPORT_COLUMNS, report_frame
from eduface.checkin.schemas import AttendanceFact


def fact(name, subject, when):
    return AttendanceFact(
        id=f"rec-{name}",
        student_id=f"stu-{name}",
        student_name=name,
        department="Computer Science",
        subject=subject,
        date=when.date(),
        timestamp=when,
        verification_confidence=90,
    )


def test_report_rows_newest_first_with_subject_names():
    records = [
        fact("Alex", "CS101", datetime(2025, 3, 10, 9, 5, 30)),
        fact("Sam", "CS102", datetime(2025, 3, 10, 10, 2, 0)),
    ]

    df = report_frame(records, {"CS101": "Data Structures"})

    assert list(df.columns) == REPORT_COLUMNS
    assert df.to_dict("records") == [
        {"Date": "2025-03-10", "Name": "Sam", "Department": "Computer Science",
         "Subject": "CS102", "Status": "PRESENT", "Time": "10:02:00"},
        {"Date": "2025-03-10", "Name": "Alex", "Department": "Computer Science",
         "Subject": "Data Structures", "Status": "PRESENT", "Time": "09:05:30"},
    ]


def test_empty_report_keeps_columns():
    df = report_frame([], {})
    assert df.empty
    assert list(df.columns) == REPORT_COLUMNS


def test_times_are_shown_in_campus_timezone():
    # stored as naive UTC, the way MongoDB returns it
    records = [fact("Alex", "CS101", datetime(2025, 3, 10, 3, 35, 0))]

    df = report_frame(records, {}, ZoneInfo("Asia/Kolkata"))

    assert df.loc[0, "Time"] == "09:05:00"


def test_aware_timestamps_are_converted():
    when = datetime(2025, 3, 10, 9, 5, tzinfo=ZoneInfo("Asia/Kolkata"))
    df = report_frame([fact("Alex", "CS101", when)], {}, ZoneInfo("Europe/London"))
    assert df.loc[0, "Time"] == "03:35:00"
