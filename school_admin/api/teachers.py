from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.teachers import TeacherListResponse
from school_admin.services import records
from school_admin.services.access import UserAccess, check_access
from school_admin.middleware.authentication import get_current_access, ensure_allowed

router = APIRouter()

@router.get("/teachers", response_model=TeacherListResponse)
async def get_teachers(
    class_name: Optional[str] = Query(None, alias="className"),
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get teachers, optionally only those assigned to one class.

    Admins and head teachers see the whole staff list. Other teachers only
    see colleagues who share one of their classes.
    """
    decision = ensure_allowed(check_access(current_user, class_name), current_user)

    if class_name:
        classes = [class_name]
    elif decision.restricted:
        classes = sorted(decision.effective_classes or [])
    else:
        classes = None

    teachers = await records.load_teachers(db, classes=classes)

    return {"status": "success", "data": teachers}
