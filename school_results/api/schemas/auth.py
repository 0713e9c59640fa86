from pydantic import BaseModel, constr


class LoginRequest(BaseModel):
    email: constr(strip_whitespace=True, to_lower=True, min_length=3)
    password: constr(min_length=1)


class RegisterAdmin(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    email: constr(strip_whitespace=True, to_lower=True, min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: constr(min_length=6)


class AdminResponse(BaseModel):
    id: int
    email: str
    name: str
    isSuperAdmin: bool

    @classmethod
    def from_model(cls, admin) -> "AdminResponse":
        return cls(
            id=admin.id,
            email=admin.email,
            name=admin.name,
            isSuperAdmin=admin.is_super_admin,
        )
