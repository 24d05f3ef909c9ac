from typing import List, Optional
from pydantic import BaseModel, Field, validator

from school_admin.schemas.base import CamelModel


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @validator('email')
    def normalize_email(cls, v):
        return v.strip().lower()


class TeacherProfile(CamelModel):
    id: int
    email: str
    name: str
    first_name: str
    last_name: str
    role: str
    gender: Optional[str] = None
    classes: List[str] = []
    subjects: List[str] = []
    form_class: Optional[str] = None
    requires_password_change: bool = False


class LoginResponse(CamelModel):
    status: str = "success"
    data: TeacherProfile
    token: str
    requires_password_change: bool = False


class AccessOut(CamelModel):
    user_id: Optional[int] = None
    email: Optional[str] = None
    role: str
    classes: List[str] = []
    subjects: List[str] = []


class VerifyResponse(CamelModel):
    status: str = "success"
    data: AccessOut


class PasswordChange(CamelModel):
    # Not needed while the account is flagged for a forced change
    current_password: Optional[str] = None
    new_password: str = Field(..., min_length=6)


class MessageResponse(CamelModel):
    status: str = "success"
    message: str
