from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, Discriminator, RootModel, Tag, conint, constr, field_validator


def _obtained_to_text(value: Union[str, int, float]) -> str:
    if isinstance(value, bool):
        raise ValueError("obtained must be a number or a numeric string")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class MarkUpdate(BaseModel):
    studentId: int
    subjectId: int
    obtained: Union[str, int, float]

    @field_validator("obtained", mode="after")
    @classmethod
    def obtained_as_text(cls, value):
        return _obtained_to_text(value)


class BulkMarkEntry(BaseModel):
    id: Optional[Union[int, str]] = None
    subject: constr(strip_whitespace=True, min_length=1)
    date: Optional[str] = None
    obtained: Union[str, int, float] = "0"
    max: conint(gt=0) = 100

    @field_validator("obtained", mode="after")
    @classmethod
    def obtained_as_text(cls, value):
        return _obtained_to_text(value)

    def existing_mark_id(self) -> Optional[int]:
        """Numeric id of a stored mark, or None for new rows ("new-3", "", None)."""
        if self.id is None:
            return None
        if isinstance(self.id, int):
            return self.id
        text = self.id.strip()
        return int(text) if text.isdigit() else None


class BulkMarkUpdate(BaseModel):
    studentId: int
    marks: List[BulkMarkEntry]


MARK_BODY_TAGS = ("single", "bulk")


def _mark_body_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "bulk" if "marks" in value else "single"
    return "bulk" if isinstance(value, BulkMarkUpdate) else "single"


class MarkBody(RootModel):
    """A body with "marks" is a whole mark set; anything else is one mark."""
    root: Annotated[
        Union[
            Annotated[MarkUpdate, Tag("single")],
            Annotated[BulkMarkUpdate, Tag("bulk")],
        ],
        Discriminator(_mark_body_kind),
    ]


class MarkResponse(BaseModel):
    id: int
    studentId: int
    subjectId: int
    obtained: str

    @classmethod
    def from_model(cls, mark) -> "MarkResponse":
        return cls(
            id=mark.id,
            studentId=mark.student_id,
            subjectId=mark.subject_id,
            obtained=mark.obtained,
        )


class BulkMarkResult(BaseModel):
    message: str
    updated_count: int
    deleted_count: int
