from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func

from school_admin.config import settings
from school_admin.models.people import Teacher
from school_admin.services.access import Role

# Password hashing utilities
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password, hashed_password):
    """Verify a password against a hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password):
    """Generate a password hash."""
    return pwd_context.hash(password)

async def authenticate_teacher(email: str, password: str, db: AsyncSession) -> Optional[Teacher]:
    """
    Authenticate a teacher with email and password.
    Returns the teacher if authentication is successful, None otherwise.
    """
    sanitized_email = email.strip().lower()
    result = await db.execute(select(Teacher).where(func.lower(Teacher.email) == sanitized_email))
    teacher = result.scalars().first()

    if not teacher:
        return None

    if not verify_password(password, teacher.hashed_password):
        return None

    return teacher

def build_access_claims(teacher: Teacher) -> Dict[str, Any]:
    """
    Build the access claims signed into a teacher's token.

    The form class is folded into the class list so that a form master's own
    class always counts as an assigned class.
    """
    role = Role.resolve(teacher.primary_role, teacher.all_roles)
    classes = list(teacher.classes or [])
    if teacher.form_class and teacher.form_class not in classes:
        classes.append(teacher.form_class)

    return {
        "sub": str(teacher.id),
        "email": teacher.email,
        "role": role.value,
        "classes": classes,
        "subjects": list(teacher.subjects or []),
    }

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token with the given data and expiration.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    return encoded_jwt
