import pytest

from school_results.api.schemas.student import MarkWithSubject, StudentWithMarks
from school_results.api.schemas.subject import SubjectResponse
from school_results.services import aggregation

ANNUAL = SubjectResponse(id=1, name="IIC Annual Test 2026", date="2026-01-18", maxMarks=80, classId=1)
UNIT_TEST = SubjectResponse(id=2, name="Unit Test 1", date="2025-08-10", maxMarks=80, classId=1)
UNDATED = SubjectResponse(id=3, name="Oral", date=None, maxMarks=20, classId=1)


def student(student_id, name, *scores):
    marks = [
        MarkWithSubject(id=student_id * 10 + i, studentId=student_id, subjectId=subject.id,
                        obtained=obtained, subject=subject)
        for i, (subject, obtained) in enumerate(scores)
    ]
    return StudentWithMarks(id=student_id, rollNo=student_id, name=name, classId=1, marks=marks)


@pytest.mark.parametrize("raw, expected", [
    ("54", 54.0),
    (" 12.5 ", 12.5),
    ("", 0.0),
    ("absent", 0.0),
    ("nan", 0.0),
    ("inf", 0.0),
    (None, 0.0),
    (7, 7.0),
])
def test_parse_obtained(raw, expected):
    assert aggregation.parse_obtained(raw) == expected


def test_pass_threshold_is_inclusive():
    assert aggregation.is_pass(33)
    assert not aggregation.is_pass(32.99)


def test_mark_percentage_with_zero_max():
    assert aggregation.mark_percentage("10", 0) == 0.0
    assert aggregation.mark_percentage("20", 80) == 25.0


def test_summarize_totals_and_percentage():
    standing = aggregation.summarize(student(1, "Aakash Yadav", (ANNUAL, "54"), (UNIT_TEST, "0")))

    assert standing.totalObtained == 54
    assert standing.totalMax == 160
    assert standing.percentage == pytest.approx(33.75)


def test_summarize_without_marks():
    standing = aggregation.summarize(student(1, "New Student"))
    assert standing.totalMax == 0
    assert standing.percentage == 0.0


def test_rank_students_descending_with_stable_ties():
    students = [
        student(1, "Aakash Yadav", (ANNUAL, "54")),
        student(2, "Rahul Kumar", (ANNUAL, "70")),
        student(3, "Gungun", (ANNUAL, "54")),
        student(4, "Prince Kumar", (ANNUAL, "0")),
    ]

    standings = aggregation.rank_students(students)

    assert [s.name for s in standings] == ["Rahul Kumar", "Aakash Yadav", "Gungun", "Prince Kumar"]
    assert [s.rank for s in standings] == [1, 2, 3, 4]
    assert aggregation.rank_students(students) == standings


def test_class_average():
    standings = aggregation.rank_students([
        student(1, "A", (ANNUAL, "40")),
        student(2, "B", (ANNUAL, "20")),
    ])
    assert aggregation.class_average(standings) == pytest.approx(37.5)
    assert aggregation.class_average([]) == 0.0


def test_subject_columns_ordered_by_date_with_undated_first():
    students = [
        student(1, "A", (ANNUAL, "1"), (UNIT_TEST, "2")),
        student(2, "B", (UNIT_TEST, "3"), (UNDATED, "4")),
    ]

    columns = aggregation.subject_columns(students)

    assert [c.id for c in columns] == [UNDATED.id, UNIT_TEST.id, ANNUAL.id]


def test_subject_date_key_falls_back_to_epoch():
    assert aggregation.subject_date_key("not a date") == aggregation.EPOCH
    assert aggregation.subject_date_key("2025-08-10T00:00:00Z").isoformat() == "2025-08-10"


def test_build_marksheet():
    sheet = aggregation.build_marksheet(student(5, "Usha Kumari", (ANNUAL, "38"), (UNIT_TEST, "20")))

    assert sheet.student.name == "Usha Kumari"
    assert [row.subject for row in sheet.rows] == ["Unit Test 1", "IIC Annual Test 2026"]
    assert [row.passed for row in sheet.rows] == [False, True]
    assert sheet.rows[1].percentage == pytest.approx(47.5)
    assert sheet.totalObtained == 58
    assert sheet.totalMax == 160
