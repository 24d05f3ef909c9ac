"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from school_admin.database import get_db
from school_admin.main import app
from school_admin.services.auth import create_access_token


async def _no_db():
    # Handlers under test have their data helpers patched, so no session is needed
    yield None


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """API client with the database dependency stubbed out (startup hooks do not run)."""
    app.dependency_overrides[get_db] = _no_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_token(
    role: str,
    classes: Iterable[str] = (),
    subjects: Iterable[str] = (),
    user_id: int = 1,
    expires_delta: Optional[timedelta] = None,
) -> str:
    return create_access_token(
        {
            "sub": str(user_id),
            "email": f"teacher{user_id}@school.test",
            "role": role,
            "classes": list(classes),
            "subjects": list(subjects),
        },
        expires_delta=expires_delta,
    )


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Build an Authorization header for a teacher with the given role and assignments."""

    def _headers(role: str, classes: Iterable[str] = (), subjects: Iterable[str] = (), **kwargs: Any) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(role, classes, subjects, **kwargs)}"}

    return _headers
