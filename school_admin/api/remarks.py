import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.remarks import RemarkCreate, RemarkListResponse, RemarkSaveResponse
from school_admin.services import records
from school_admin.services.access import UserAccess, check_access
from school_admin.middleware.authentication import get_current_access, ensure_allowed

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/remarks", response_model=RemarkListResponse)
async def get_remarks(
    class_name: str = Query(..., alias="className"),
    term: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get form master remarks for every student in a class.
    """
    ensure_allowed(check_access(current_user, class_name), current_user)

    remarks = await records.load_remarks(db, class_name, term=term, academic_year=year)

    return {"status": "success", "data": remarks}

@router.post("/remarks", response_model=RemarkSaveResponse)
async def save_remark(
    remark_data: RemarkCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Add or update a student's remarks for a term.

    Remarks belong to the class rather than a subject, so only class access is checked.
    """
    student = await records.find_student(db, remark_data.student_id)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student with ID {remark_data.student_id} not found"
        )

    ensure_allowed(check_access(current_user, student.class_name), current_user)

    values = remark_data.model_dump(exclude_unset=True, exclude={"student_id", "term"})
    remark, updated = await records.save_remark(db, student, remark_data.term, values)

    logger.info(
        f"Remarks {'updated' if updated else 'added'} for student {student.id_number} "
        f"[term: {remark_data.term}] [by: {current_user.user_id}] "
        f"[request_id: {current_user.request_id}]"
    )

    return {
        "status": "success",
        "message": "Remarks updated successfully" if updated else "Remarks added successfully",
        "data": remark,
    }
