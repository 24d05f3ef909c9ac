from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.broadsheet import BroadsheetResponse
from school_admin.services import records
from school_admin.services.access import UserAccess, check_access
from school_admin.services.broadsheet import build_broadsheet
from school_admin.middleware.authentication import get_current_access, ensure_allowed

router = APIRouter()

@router.get("/broadsheet", response_model=BroadsheetResponse)
async def get_broadsheet(
    class_name: str = Query(..., alias="className"),
    term: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get the broadsheet for a class: every student, subject and score with subject positions.
    """
    decision = ensure_allowed(check_access(current_user, class_name), current_user)

    students = await records.load_students(db, classes=[class_name])
    if not students:
        return {
            "status": "success",
            "message": "No students found in this class",
            "data": build_broadsheet(class_name, term, [], []),
        }

    scores = await records.load_marks(
        db,
        class_name=class_name,
        term=term,
        subjects=decision.effective_subjects,
    )

    return {
        "status": "success",
        "message": f"Broadsheet data retrieved for {class_name}",
        "data": build_broadsheet(class_name, term, students, scores),
    }
