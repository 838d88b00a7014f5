from pydantic import BaseModel


class ProfileResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    profile_picture_url: str | None
    has_employee_record: bool


class ProfileEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: ProfileResponse
