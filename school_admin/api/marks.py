import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.marks import MarkCreate, MarkListResponse, MarkSaveResponse
from school_admin.services import records
from school_admin.services.access import UserAccess, check_access, check_write_access
from school_admin.services.broadsheet import rank_with_positions
from school_admin.services.grading import compute_scores, calculate_remark
from school_admin.middleware.authentication import get_current_access, ensure_allowed

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/marks", response_model=MarkListResponse)
async def get_marks(
    class_name: Optional[str] = Query(None, alias="className"),
    subject: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    student_id: Optional[str] = Query(None, alias="studentId"),
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get marks for a student, or for a class (optionally one subject) with subject positions.
    """
    if student_id:
        student = await records.find_student(db, student_id)
        if not student:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Student with ID {student_id} not found"
            )

        decision = ensure_allowed(check_access(current_user, student.class_name, subject), current_user)
        subjects = [subject] if subject else decision.effective_subjects
        marks = await records.load_marks(db, student_id=student.id, term=term, subjects=subjects)
        return {"status": "success", "data": marks}

    if not class_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="className or studentId is required"
        )

    decision = ensure_allowed(check_access(current_user, class_name, subject), current_user)
    subjects = [subject] if subject else decision.effective_subjects
    marks = await records.load_marks(db, class_name=class_name, term=term, subjects=subjects)

    return {"status": "success", "data": rank_with_positions(marks)}

@router.post("/marks", response_model=MarkSaveResponse)
@router.put("/marks", response_model=MarkSaveResponse)
async def save_marks(
    mark_data: MarkCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Add or update a student's marks for a subject and term.
    """
    student = await records.find_student(db, mark_data.student_id)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student with ID {mark_data.student_id} not found"
        )

    ensure_allowed(check_write_access(current_user, student.class_name, mark_data.subject), current_user)

    if mark_data.class_name and mark_data.class_name != student.class_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Student {student.id_number} is in class {student.class_name}, not {mark_data.class_name}"
        )

    scores = compute_scores(mark_data.test1, mark_data.test2, mark_data.test3, mark_data.test4, mark_data.exam)
    mark, updated = await records.save_mark(
        db,
        student,
        mark_data.subject,
        mark_data.term,
        scores,
        calculate_remark(scores.total),
        class_name=student.class_name,
        academic_year=mark_data.academic_year,
    )

    logger.info(
        f"Marks {'updated' if updated else 'added'} for student {student.id_number} "
        f"[subject: {mark_data.subject}] [term: {mark_data.term}] [by: {current_user.user_id}] "
        f"[request_id: {current_user.request_id}]"
    )

    return {
        "status": "success",
        "message": "Marks updated successfully" if updated else "Marks added successfully",
        "data": mark,
    }
