from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.students import StudentListResponse
from school_admin.services import records
from school_admin.services.access import UserAccess, check_access
from school_admin.middleware.authentication import get_current_access, ensure_allowed

router = APIRouter()

@router.get("/students", response_model=StudentListResponse)
async def get_students(
    class_name: Optional[str] = Query(None, alias="className"),
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get students, optionally for one class.

    Teachers only ever see students in the classes they are assigned to.
    """
    decision = ensure_allowed(check_access(current_user, class_name), current_user)

    if class_name:
        classes = [class_name]
    elif decision.restricted:
        classes = sorted(decision.effective_classes or [])
    else:
        classes = None

    students = await records.load_students(db, classes=classes)

    return {"status": "success", "data": students}
