from typing import List, Optional, Union
from pydantic import Field

from school_admin.schemas.base import CamelModel


class RemarkCreate(CamelModel):
    student_id: Union[int, str]
    term: str = Field(..., min_length=1)
    academic_year: Optional[str] = None
    attitude: Optional[str] = None
    interest: Optional[str] = None
    conduct: Optional[str] = None
    attendance: Optional[str] = None
    comments: Optional[str] = Field(None, max_length=1000)


class RemarkOut(CamelModel):
    id: int
    student_id: int
    class_name: Optional[str] = None
    term: str
    academic_year: Optional[str] = None
    attitude: Optional[str] = None
    interest: Optional[str] = None
    conduct: Optional[str] = None
    attendance: Optional[str] = None
    comments: Optional[str] = None
    id_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RemarkListResponse(CamelModel):
    status: str = "success"
    data: List[RemarkOut]


class RemarkSaveResponse(CamelModel):
    status: str = "success"
    message: str
    data: RemarkOut
