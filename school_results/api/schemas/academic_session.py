from pydantic import BaseModel, constr


class CreateSession(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    isActive: bool = False


class SessionResponse(BaseModel):
    id: int
    name: str
    isActive: bool

    @classmethod
    def from_model(cls, session) -> "SessionResponse":
        return cls(id=session.id, name=session.name, isActive=session.is_active)
