from pydantic import BaseModel, constr


class SettingUpdate(BaseModel):
    key: constr(strip_whitespace=True, min_length=1)
    value: str


class SettingValue(BaseModel):
    value: str = ""


class SettingSaved(BaseModel):
    success: bool = True
