from typing import List, Optional

from school_admin.schemas.base import CamelModel


class StudentOut(CamelModel):
    id: int
    id_number: str
    first_name: str
    last_name: str
    class_name: Optional[str] = None
    gender: Optional[str] = None
    academic_year: Optional[str] = None


class StudentListResponse(CamelModel):
    status: str = "success"
    data: List[StudentOut]
