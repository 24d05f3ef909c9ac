from typing import List

from school_admin.schemas.base import CamelModel


class ClassOut(CamelModel):
    name: str


class ClassListResponse(CamelModel):
    status: str = "success"
    data: List[ClassOut]


class ClassSubjects(CamelModel):
    class_name: str
    subjects: List[str]
    count: int


class ClassSubjectsResponse(CamelModel):
    status: str = "success"
    data: ClassSubjects
