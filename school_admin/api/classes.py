from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.classes import ClassListResponse, ClassSubjectsResponse
from school_admin.services import records
from school_admin.services.access import UserAccess, check_access, filter_classes
from school_admin.middleware.authentication import get_current_access, ensure_allowed

router = APIRouter()

@router.get("/classes", response_model=ClassListResponse)
async def get_classes(
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get the classes the caller may open, in name order.
    """
    classes = filter_classes(current_user, await records.load_classes(db))

    return {"status": "success", "data": [{"name": name} for name in classes]}

@router.get("/classes/{class_name}/subjects", response_model=ClassSubjectsResponse)
async def get_class_subjects(
    class_name: str = Path(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Get all subjects taught in a class, based on teacher assignments.
    """
    ensure_allowed(check_access(current_user, class_name), current_user)

    subjects = await records.load_class_subjects(db, class_name)

    return {
        "status": "success",
        "data": {"class_name": class_name, "subjects": subjects, "count": len(subjects)},
    }
