from typing import Optional

from pydantic import BaseModel, conint, constr


class CreateSubject(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    maxMarks: conint(gt=0) = 100
    date: Optional[str] = None
    classId: int


class UpdateSubject(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    maxMarks: Optional[conint(gt=0)] = None
    date: Optional[str] = None


class SubjectResponse(BaseModel):
    id: int
    name: str
    date: Optional[str] = None
    maxMarks: int
    classId: int

    @classmethod
    def from_model(cls, subject) -> "SubjectResponse":
        return cls(
            id=subject.id,
            name=subject.name,
            date=subject.date,
            maxMarks=subject.max_marks,
            classId=subject.class_id,
        )


# Stands in for a subject row that no longer exists.
UNKNOWN_SUBJECT = SubjectResponse(id=0, name="Unknown", date="", maxMarks=100, classId=0)
