from typing import List, Optional

from pydantic import BaseModel, constr

from school_results.api.schemas.mark import MarkResponse
from school_results.api.schemas.subject import SubjectResponse


class CreateStudent(BaseModel):
    rollNo: int
    name: constr(strip_whitespace=True, min_length=1)
    classId: int
    isPaid: bool = True


class UpdateStudent(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    rollNo: Optional[int] = None


class StudentResponse(BaseModel):
    id: int
    rollNo: int
    name: str
    classId: int
    isPaid: bool = True

    @classmethod
    def from_model(cls, student) -> "StudentResponse":
        return cls(
            id=student.id,
            rollNo=student.roll_no,
            name=student.name,
            classId=student.class_id,
            isPaid=student.is_paid,
        )


class MarkWithSubject(MarkResponse):
    subject: SubjectResponse


class StudentWithMarks(StudentResponse):
    marks: List[MarkWithSubject] = []
