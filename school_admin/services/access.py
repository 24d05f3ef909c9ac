from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional


class Role(str, Enum):
    """Teacher roles, ordered from most to least privileged."""

    ADMIN = "admin"
    HEAD_TEACHER = "head_teacher"
    CLASS_TEACHER = "class_teacher"
    FORM_MASTER = "form_master"
    SUBJECT_TEACHER = "subject_teacher"

    @classmethod
    def resolve(cls, primary_role: Optional[str] = None, all_roles: Optional[Iterable[str]] = None) -> "Role":
        """
        Pick the single effective role for a teacher record.

        The most privileged role named in either the primary role or the
        list of all roles wins. Unknown names (such as the legacy "teacher")
        fall back to SUBJECT_TEACHER.
        """
        names = set(all_roles or [])
        if primary_role:
            names.add(primary_role)

        for role in cls:
            if role.value in names:
                return role
        return cls.SUBJECT_TEACHER

    @property
    def is_unrestricted(self) -> bool:
        return self in (Role.ADMIN, Role.HEAD_TEACHER)

    @property
    def sees_whole_class(self) -> bool:
        return self in (Role.CLASS_TEACHER, Role.FORM_MASTER)


class Denial(str, Enum):
    CLASS_ACCESS_DENIED = "class_access_denied"
    SUBJECT_ACCESS_DENIED = "subject_access_denied"
    READ_ONLY_ROLE = "read_only_role"


@dataclass(frozen=True)
class UserAccess:
    """
    Per-request access descriptor rebuilt from the signed credential.
    """

    role: Role
    assigned_classes: FrozenSet[str] = field(default_factory=frozenset)
    assigned_subjects: FrozenSet[str] = field(default_factory=frozenset)
    user_id: Optional[int] = None
    email: Optional[str] = None
    # Correlates log lines written while serving this request
    request_id: Optional[str] = None


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of an access check.

    effective_classes / effective_subjects are the filters to push into the
    data query when ``restricted`` is set. ``None`` means no narrowing on
    that axis.
    """

    allowed: bool
    restricted: bool = False
    effective_classes: Optional[FrozenSet[str]] = None
    effective_subjects: Optional[FrozenSet[str]] = None
    denial: Optional[Denial] = None
    requested_class: Optional[str] = None
    requested_subject: Optional[str] = None


def _deny(denial: Denial, requested_class: Optional[str], requested_subject: Optional[str]) -> AccessDecision:
    return AccessDecision(
        allowed=False,
        denial=denial,
        requested_class=requested_class,
        requested_subject=requested_subject,
    )


def check_access(
    user: UserAccess,
    requested_class: Optional[str] = None,
    requested_subject: Optional[str] = None,
) -> AccessDecision:
    """
    Decide whether ``user`` may read data for a class and/or subject.

    Admins and head teachers are never restricted. Everyone else must be
    assigned to the requested class and teach the requested subject, except
    that class teachers and form masters see every subject of a class they
    are assigned to.
    """
    if user.role.is_unrestricted:
        return AccessDecision(
            allowed=True,
            restricted=False,
            requested_class=requested_class,
            requested_subject=requested_subject,
        )

    owns_class = requested_class is not None and requested_class in user.assigned_classes
    if requested_class is not None and not owns_class:
        return _deny(Denial.CLASS_ACCESS_DENIED, requested_class, requested_subject)

    exempt = owns_class and user.role.sees_whole_class
    if requested_subject is not None and not exempt and requested_subject not in user.assigned_subjects:
        return _deny(Denial.SUBJECT_ACCESS_DENIED, requested_class, requested_subject)

    return AccessDecision(
        allowed=True,
        restricted=True,
        effective_classes=user.assigned_classes,
        effective_subjects=None if exempt else user.assigned_subjects,
        requested_class=requested_class,
        requested_subject=requested_subject,
    )


def check_write_access(user: UserAccess, class_name: str, subject: Optional[str] = None) -> AccessDecision:
    """
    Decide whether ``user`` may record marks for ``subject`` in ``class_name``.

    Head teachers supervise only and never write. Class teachers write any
    subject of their class; form masters and subject teachers only write
    subjects they teach.
    """
    if user.role is Role.ADMIN:
        return AccessDecision(allowed=True, requested_class=class_name, requested_subject=subject)
    if user.role is Role.HEAD_TEACHER:
        return _deny(Denial.READ_ONLY_ROLE, class_name, subject)

    if class_name not in user.assigned_classes:
        return _deny(Denial.CLASS_ACCESS_DENIED, class_name, subject)

    if user.role is not Role.CLASS_TEACHER and subject is not None and subject not in user.assigned_subjects:
        return _deny(Denial.SUBJECT_ACCESS_DENIED, class_name, subject)

    return AccessDecision(
        allowed=True,
        restricted=True,
        effective_classes=frozenset([class_name]),
        requested_class=class_name,
        requested_subject=subject,
    )


def filter_classes(user: UserAccess, classes: Iterable[str]) -> List[str]:
    """Keep only the classes ``user`` may see, preserving order."""
    if user.role.is_unrestricted:
        return list(classes)
    return [name for name in classes if name in user.assigned_classes]
