from typing import List

from school_admin.schemas.base import CamelModel
from school_admin.schemas.marks import MarkOut
from school_admin.schemas.students import StudentOut


class Broadsheet(CamelModel):
    class_name: str
    term: str
    students: List[StudentOut]
    subjects: List[str]
    scores: List[MarkOut]
    total_students: int
    total_subjects: int


class BroadsheetResponse(CamelModel):
    status: str = "success"
    message: str
    data: Broadsheet
