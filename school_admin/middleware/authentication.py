import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from school_admin.config import settings
from school_admin.middleware.logging import request_id_of
from school_admin.services.access import AccessDecision, Denial, Role, UserAccess

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

def access_from_claims(payload: dict, request_id: Optional[str] = None) -> UserAccess:
    """
    Rebuild the access descriptor from decoded token claims.

    Missing role, class or subject claims default to the least privileged
    values rather than failing.
    """
    user_id = payload.get("sub")
    return UserAccess(
        role=Role.resolve(payload.get("role"), payload.get("all_roles")),
        assigned_classes=frozenset(payload.get("classes") or []),
        assigned_subjects=frozenset(payload.get("subjects") or []),
        user_id=int(user_id) if user_id and str(user_id).isdigit() else None,
        email=payload.get("email"),
        request_id=request_id,
    )

async def get_current_access(request: Request, token: str = Depends(oauth2_scheme)) -> UserAccess:
    """
    Get the caller's access descriptor from the provided JWT token.

    Args:
        request: The incoming request, used for its logging request id
        token: The JWT token

    Returns:
        The caller's role and class/subject assignments

    Raises:
        HTTPException: If the token is invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        raise credentials_exception

    if payload.get("sub") is None:
        raise credentials_exception

    token_exp = payload.get("exp")
    if token_exp is None:
        raise credentials_exception

    if datetime.fromtimestamp(token_exp, tz=timezone.utc) < datetime.now(timezone.utc):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access = access_from_claims(payload, request_id=request_id_of(request))
    request.state.user_id = access.user_id
    return access

def ensure_allowed(decision: AccessDecision, user: UserAccess) -> AccessDecision:
    """
    Turn a denied access decision into a 403 response.

    Returns the decision unchanged when it is allowed so callers can keep
    using its effective class and subject filters.
    """
    if decision.allowed:
        return decision

    if decision.denial is Denial.CLASS_ACCESS_DENIED:
        detail = f"Access denied. You are not assigned to class {decision.requested_class}."
    elif decision.denial is Denial.READ_ONLY_ROLE:
        detail = "Access denied. Head teachers have read-only access to marks."
    elif decision.requested_class:
        detail = (
            f"Access denied. You do not have permission to access {decision.requested_subject} "
            f"in class {decision.requested_class}."
        )
    else:
        detail = f"Access denied. You are not assigned to teach {decision.requested_subject}."

    logger.warning(
        f"Access denied for user {user.user_id} ({user.role.value}): "
        f"{decision.denial.value if decision.denial else 'denied'} "
        f"[class: {decision.requested_class}] [subject: {decision.requested_subject}] "
        f"[request_id: {user.request_id}]"
    )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
