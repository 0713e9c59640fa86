"""
Totals, percentages, rankings and table columns derived from loaded students.

Everything here is pure: no database access, no mutation of the inputs.
"""
import math
from datetime import date
from typing import Iterable, List, Optional, Union

from school_results.api.schemas.report import MarksheetResponse, MarksheetRow, StudentStanding
from school_results.api.schemas.student import StudentResponse, StudentWithMarks
from school_results.api.schemas.subject import SubjectResponse

PASS_PERCENTAGE = 33
EPOCH = date(1970, 1, 1)


def parse_obtained(value: Union[str, int, float, None]) -> float:
    """Numeric value of a stored score; anything unparseable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip())
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def mark_percentage(obtained: Union[str, float, None], max_marks: int) -> float:
    if not max_marks or max_marks <= 0:
        return 0.0
    return 100 * parse_obtained(obtained) / max_marks


def is_pass(percentage: float) -> bool:
    return percentage >= PASS_PERCENTAGE


def subject_date_key(raw: Optional[str]) -> date:
    """Missing or unparseable dates sort as the epoch, i.e. before real dates."""
    if not raw:
        return EPOCH
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        return EPOCH


def summarize(student: StudentWithMarks) -> StudentStanding:
    total_obtained = sum(parse_obtained(m.obtained) for m in student.marks)
    total_max = sum(m.subject.maxMarks for m in student.marks)
    percentage = 100 * total_obtained / total_max if total_max > 0 else 0.0

    return StudentStanding(
        id=student.id,
        rollNo=student.rollNo,
        name=student.name,
        totalObtained=total_obtained,
        totalMax=total_max,
        percentage=percentage,
    )


def rank_students(students: Iterable[StudentWithMarks]) -> List[StudentStanding]:
    """
    Standings by descending percentage, rank 1 first.

    The sort is stable: students with equal percentages keep the order they
    were given in, so the same input always yields the same ranking.
    """
    standings = [summarize(s) for s in students]
    ranked = sorted(standings, key=lambda s: -s.percentage)
    for position, standing in enumerate(ranked, start=1):
        standing.rank = position
    return ranked


def class_average(standings: List[StudentStanding]) -> float:
    if not standings:
        return 0.0
    return sum(s.percentage for s in standings) / len(standings)


def subject_columns(students: Iterable[StudentWithMarks]) -> List[SubjectResponse]:
    """
    Distinct subjects referenced by the students' marks, ordered by date.

    Subjects are deduplicated by id (first occurrence wins); equal dates keep
    first-seen order.
    """
    seen = {}
    for student in students:
        for mark in student.marks:
            if mark.subjectId not in seen:
                seen[mark.subjectId] = mark.subject.model_copy(update={"id": mark.subjectId})
    return sorted(seen.values(), key=lambda s: subject_date_key(s.date))


def build_marksheet(student: StudentWithMarks) -> MarksheetResponse:
    rows = []
    for mark in sorted(student.marks, key=lambda m: subject_date_key(m.subject.date)):
        percentage = mark_percentage(mark.obtained, mark.subject.maxMarks)
        rows.append(MarksheetRow(
            markId=mark.id,
            subjectId=mark.subjectId,
            subject=mark.subject.name,
            date=mark.subject.date or None,
            obtained=mark.obtained,
            max=mark.subject.maxMarks,
            percentage=percentage,
            passed=is_pass(percentage),
        ))

    standing = summarize(student)
    return MarksheetResponse(
        student=StudentResponse(**student.model_dump(exclude={"marks"})),
        rows=rows,
        totalObtained=standing.totalObtained,
        totalMax=standing.totalMax,
        percentage=standing.percentage,
    )
