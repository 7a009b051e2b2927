"""
tests/conftest.py -- Shared test fixtures for school records integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory stores sharing one DB
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus teacher and student JWTs
  - empty_client: TestClient over a database with no users at all

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

Environment must be set before any auth/core import so get_settings() sees
it: DEBUG auto-generates SECRET_KEY, BCRYPT_ROUNDS keeps hashing fast, and
LOGIN_RATE_LIMIT is raised so the login tests never trip the limiter.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set env before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password
from school.store import SchoolStore

TEACHER_USERNAME = "testteacher"
TEACHER_PASSWORD = "teachpass123"  # noqa: S105 # nosec B105 -- test fixture credential
STUDENT_USERNAME = "teststudent"
STUDENT_PASSWORD = "studpass123"  # noqa: S105 # nosec B105 -- test fixture credential


@dataclass
class ApiContext:
    client: TestClient
    teacher_token: str
    student_token: str
    teacher_id: int
    student_id: int

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, SchoolStore]:
    """Create both stores over one named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    db_url = f"sqlite:///file:test_school_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=db_url), SchoolStore(db_url=db_url)


def _patch_lifespan(user_store: UserStore, school_store: SchoolStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.school_store = school_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext with one teacher and one student already registered."""
    user_store, school_store = _make_test_stores(request.module.__name__.replace(".", "_"))

    teacher_id = user_store.create_user(
        User(username=TEACHER_USERNAME, role="teacher", password_hash=hash_password(TEACHER_PASSWORD))
    )
    student_id = user_store.create_user(
        User(username=STUDENT_USERNAME, role="student", password_hash=hash_password(STUDENT_PASSWORD))
    )

    app.router.lifespan_context = _patch_lifespan(user_store, school_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            teacher_token=create_access_token(teacher_id, "teacher"),
            student_token=create_access_token(student_id, "student"),
            teacher_id=teacher_id,
            student_id=student_id,
        )

    school_store.close()
    user_store.close()


@pytest.fixture(scope="module")
def empty_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient over a fresh database with no users or records."""
    user_store, school_store = _make_test_stores(request.module.__name__.replace(".", "_") + "_empty")
    app.router.lifespan_context = _patch_lifespan(user_store, school_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    school_store.close()
    user_store.close()
