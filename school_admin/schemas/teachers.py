from typing import List, Optional

from school_admin.schemas.base import CamelModel


class TeacherOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    gender: Optional[str] = None
    primary_role: Optional[str] = None
    all_roles: List[str] = []
    classes: List[str] = []
    subjects: List[str] = []
    form_class: Optional[str] = None
    requires_password_change: bool = False


class TeacherListResponse(CamelModel):
    status: str = "success"
    data: List[TeacherOut]
