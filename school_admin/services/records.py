"""
Database access for teachers, students, marks, remarks and class lists.

Query helpers return plain dicts with snake_case keys so callers can feed
them straight into ranking and the camelCase response schemas.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from school_admin.models.academics import Mark, Remark
from school_admin.models.people import Student, Teacher
from school_admin.services.grading import MarkScores

MARK_FIELDS = (
    "id", "student_id", "subject", "term", "class_name", "academic_year",
    "test1", "test2", "test3", "test4", "exam",
    "class_score", "exam_score", "total", "remark",
)
REMARK_FIELDS = (
    "id", "student_id", "class_name", "term", "academic_year",
    "attitude", "interest", "conduct", "attendance", "comments",
)
STUDENT_FIELDS = ("id", "id_number", "first_name", "last_name", "class_name", "gender", "academic_year")
TEACHER_FIELDS = (
    "id", "first_name", "last_name", "email", "gender", "primary_role", "all_roles",
    "classes", "subjects", "form_class", "requires_password_change",
)
UNASSIGNED_CLASS = "UNASSIGNED"


def _as_dict(row: Any, fields: Iterable[str]) -> Dict[str, Any]:
    return {name: getattr(row, name) for name in fields}


def _with_student(row: Any, fields: Iterable[str], student: Student) -> Dict[str, Any]:
    data = _as_dict(row, fields)
    data.update(
        id_number=student.id_number,
        first_name=student.first_name,
        last_name=student.last_name,
    )
    return data


def student_to_dict(student: Student) -> Dict[str, Any]:
    return _as_dict(student, STUDENT_FIELDS)


def teacher_to_dict(teacher: Teacher) -> Dict[str, Any]:
    data = _as_dict(teacher, TEACHER_FIELDS)
    data["all_roles"] = list(teacher.all_roles or [])
    data["classes"] = list(teacher.classes or [])
    data["subjects"] = list(teacher.subjects or [])
    return data


def mark_to_dict(mark: Mark, student: Optional[Student] = None) -> Dict[str, Any]:
    if student is None:
        return _as_dict(mark, MARK_FIELDS)
    return _with_student(mark, MARK_FIELDS, student)


def remark_to_dict(remark: Remark, student: Optional[Student] = None) -> Dict[str, Any]:
    if student is None:
        return _as_dict(remark, REMARK_FIELDS)
    return _with_student(remark, REMARK_FIELDS, student)


async def find_student(db: AsyncSession, student_ref: Union[int, str]) -> Optional[Student]:
    """Look a student up by numeric database id or by school id number."""
    ref = str(student_ref).strip()
    if ref.isdigit():
        query = select(Student).where(Student.id == int(ref))
    else:
        query = select(Student).where(Student.id_number == ref)
    result = await db.execute(query)
    return result.scalars().first()


async def load_students(db: AsyncSession, classes: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
    """
    Load students ordered by name.

    ``classes`` narrows the result to those classes; ``None`` loads everyone.
    """
    query = select(Student)
    if classes is not None:
        query = query.where(Student.class_name.in_(list(classes)))
    query = query.order_by(Student.class_name, Student.last_name, Student.first_name)

    result = await db.execute(query)
    return [student_to_dict(student) for student in result.scalars().all()]


async def load_marks(
    db: AsyncSession,
    class_name: Optional[str] = None,
    student_id: Optional[int] = None,
    term: Optional[str] = None,
    subjects: Optional[Iterable[str]] = None,
) -> List[Dict[str, Any]]:
    """
    Load marks joined with their students, ordered by subject then name.

    ``subjects`` narrows the result to those subjects; ``None`` loads all.
    """
    query = select(Mark, Student).join(Student, Mark.student_id == Student.id)
    if class_name is not None:
        query = query.where(Student.class_name == class_name)
    if student_id is not None:
        query = query.where(Mark.student_id == student_id)
    if term:
        query = query.where(Mark.term == term)
    if subjects is not None:
        query = query.where(Mark.subject.in_(list(subjects)))
    query = query.order_by(Mark.subject, Student.last_name, Student.first_name)

    result = await db.execute(query)
    return [mark_to_dict(mark, student) for mark, student in result.all()]


async def save_mark(
    db: AsyncSession,
    student: Student,
    subject: str,
    term: str,
    scores: MarkScores,
    remark: str,
    class_name: Optional[str] = None,
    academic_year: Optional[str] = None,
) -> tuple:
    """
    Insert or update the mark for ``student`` in ``subject`` and ``term``.

    Returns:
        The saved mark as a dict and whether an existing row was updated.
    """
    result = await db.execute(
        select(Mark).where(
            Mark.student_id == student.id,
            Mark.subject == subject,
            Mark.term == term,
        )
    )
    mark = result.scalars().first()
    updated = mark is not None
    if mark is None:
        mark = Mark(student_id=student.id, subject=subject, term=term)
        db.add(mark)

    mark.class_name = class_name or student.class_name
    mark.academic_year = academic_year or student.academic_year
    mark.test1 = scores.test1
    mark.test2 = scores.test2
    mark.test3 = scores.test3
    mark.test4 = scores.test4
    mark.exam = scores.exam
    mark.class_score = round(scores.class_score, 2)
    mark.exam_score = round(scores.exam_score, 2)
    mark.total = round(scores.total, 2)
    mark.remark = remark

    await db.commit()
    await db.refresh(mark)

    return mark_to_dict(mark, student), updated


async def load_remarks(
    db: AsyncSession,
    class_name: str,
    term: Optional[str] = None,
    academic_year: Optional[str] = None,
) -> List[Dict[str, Any]]:
    query = (
        select(Remark, Student)
        .join(Student, Remark.student_id == Student.id)
        .where(Student.class_name == class_name)
    )
    if term:
        query = query.where(Remark.term == term)
    if academic_year:
        query = query.where(Remark.academic_year == academic_year)
    query = query.order_by(Student.last_name, Student.first_name)

    result = await db.execute(query)
    return [remark_to_dict(remark, student) for remark, student in result.all()]


async def save_remark(db: AsyncSession, student: Student, term: str, values: Dict[str, Any]) -> tuple:
    """Insert or update the remark for ``student`` in a term and academic year."""
    academic_year = values.get("academic_year") or student.academic_year
    result = await db.execute(
        select(Remark).where(
            Remark.student_id == student.id,
            Remark.term == term,
            Remark.academic_year == academic_year,
        )
    )
    remark = result.scalars().first()
    updated = remark is not None
    if remark is None:
        remark = Remark(student_id=student.id, term=term, academic_year=academic_year)
        db.add(remark)

    remark.class_name = student.class_name
    for key in ("attitude", "interest", "conduct", "attendance", "comments"):
        if key in values:
            setattr(remark, key, values[key])

    await db.commit()
    await db.refresh(remark)

    return remark_to_dict(remark, student), updated


async def load_class_subjects(db: AsyncSession, class_name: str) -> List[str]:
    """Collect the distinct subjects taught in a class by any assigned teacher."""
    result = await db.execute(
        select(Teacher.subjects).where(
            or_(
                Teacher.classes.any(class_name),
                Teacher.form_class == class_name,
            )
        )
    )
    subjects = set()
    for teacher_subjects in result.scalars().all():
        subjects.update(teacher_subjects or [])
    return sorted(subjects)


async def load_classes(db: AsyncSession) -> List[str]:
    """List every class that has students, skipping the holding class for unplaced students."""
    result = await db.execute(
        select(Student.class_name)
        .where(Student.class_name.isnot(None), Student.class_name != UNASSIGNED_CLASS)
        .distinct()
        .order_by(Student.class_name)
    )
    return list(result.scalars().all())


async def find_teacher(db: AsyncSession, teacher_id: int) -> Optional[Teacher]:
    result = await db.execute(select(Teacher).where(Teacher.id == teacher_id))
    return result.scalars().first()


async def load_teachers(db: AsyncSession, classes: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
    """
    Load teachers ordered by name.

    ``classes`` keeps only teachers assigned to, or form master of, one of
    those classes; ``None`` loads everyone.
    """
    query = select(Teacher)
    if classes is not None:
        class_list = list(classes)
        query = query.where(
            or_(
                Teacher.classes.overlap(class_list),
                Teacher.form_class.in_(class_list),
            )
        )
    query = query.order_by(Teacher.last_name, Teacher.first_name)

    result = await db.execute(query)
    return [teacher_to_dict(teacher) for teacher in result.scalars().all()]


async def update_password(db: AsyncSession, teacher: Teacher, hashed_password: str) -> None:
    """Store a new password hash and clear the forced-change flag."""
    teacher.hashed_password = hashed_password
    teacher.requires_password_change = False
    db.add(teacher)
    await db.commit()
