from typing import List, Optional

from pydantic import BaseModel

from school_results.api.schemas.student import StudentResponse
from school_results.api.schemas.subject import SubjectResponse


class StudentStanding(BaseModel):
    rank: int = 0
    id: int
    rollNo: int
    name: str
    totalObtained: float
    totalMax: int
    percentage: float


class LeaderboardResponse(BaseModel):
    classId: int
    columns: List[SubjectResponse]
    averagePercentage: float
    standings: List[StudentStanding]


class MarksheetRow(BaseModel):
    markId: int
    subjectId: int
    subject: str
    date: Optional[str] = None
    obtained: str
    max: int
    percentage: float
    passed: bool


class MarksheetResponse(BaseModel):
    student: StudentResponse
    rows: List[MarksheetRow]
    totalObtained: float
    totalMax: int
    percentage: float
