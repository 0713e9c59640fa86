from pydantic import BaseModel, constr


class CreateClass(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    sessionId: int


class ClassResponse(BaseModel):
    id: int
    name: str
    sessionId: int

    @classmethod
    def from_model(cls, school_class) -> "ClassResponse":
        return cls(id=school_class.id, name=school_class.name, sessionId=school_class.session_id)
