from typing import List, Optional, Union
from pydantic import Field, validator

from school_admin.schemas.base import CamelModel


class MarkCreate(CamelModel):
    # Either the numeric database id or the school id number, e.g. "eSBA020"
    student_id: Union[int, str]
    subject: str = Field(..., min_length=1)
    term: str = Field(..., min_length=1)
    class_name: Optional[str] = None
    academic_year: Optional[str] = None
    test1: Optional[float] = Field(None, ge=0, le=15)
    test2: Optional[float] = Field(None, ge=0, le=15)
    test3: Optional[float] = Field(None, ge=0, le=15)
    test4: Optional[float] = Field(None, ge=0, le=15)
    exam: Optional[float] = Field(None, ge=0, le=100)

    @validator('subject', 'term')
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v


class MarkOut(CamelModel):
    id: int
    student_id: int
    subject: str
    term: str
    class_name: Optional[str] = None
    academic_year: Optional[str] = None
    id_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    test1: Optional[float] = None
    test2: Optional[float] = None
    test3: Optional[float] = None
    test4: Optional[float] = None
    exam: Optional[float] = None
    class_score: Optional[float] = None
    exam_score: Optional[float] = None
    total: Optional[float] = None
    remark: Optional[str] = None
    rank: Optional[int] = None
    position: Optional[str] = None


class MarkListResponse(CamelModel):
    status: str = "success"
    data: List[MarkOut]


class MarkSaveResponse(CamelModel):
    status: str = "success"
    message: str
    data: MarkOut
