"""Shared fixtures.

The app is exercised without its lifespan: services are in-memory fakes
placed on ``app.state`` by the fixtures below.
"""

import os


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_INCLUDE_CALLER_INFO", "false")

from collections.abc import Callable, Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from learnermax.auth.security import create_access_token  # noqa: E402
from learnermax.courses.models import Course, PricingModel  # noqa: E402
from learnermax.enrollment.gate import EnrollmentGate  # noqa: E402
from learnermax.enrollment.models import EnrollmentRecord  # noqa: E402
from learnermax.enrollment.service import EnrollmentService  # noqa: E402
from learnermax.main import app as learnermax_app  # noqa: E402
from learnermax.progress.service import ProgressStore  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeLessonService,
    InMemoryEnrollmentRepository,
    InMemoryProgressRepository,
    make_lessons,
)


STATE_ATTRS = (
    "lesson_service",
    "enrollment_service",
    "progress_store",
    "credential_issuer",
    "redis",
)

STUDENT_ID = "student-1"
COURSE_ID = "course-1"


@pytest.fixture
def app() -> Iterator[FastAPI]:
    yield learnermax_app
    for attr in STATE_ATTRS:
        if hasattr(learnermax_app.state, attr):
            delattr(learnermax_app.state, attr)
    learnermax_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(student_id: str = STUDENT_ID) -> dict[str, str]:
        token = create_access_token({"sub": student_id, "email": f"{student_id}@example.com", "role": "student"})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def auth_headers(make_auth_headers) -> dict[str, str]:
    return make_auth_headers(STUDENT_ID)


@pytest.fixture
def lesson_service() -> FakeLessonService:
    return FakeLessonService(
        courses=[
            Course(COURSE_ID, "Python Foundations", pricing_model=PricingModel.FREE.value),
            Course("course-premium", "Premium", pricing_model=PricingModel.PAID.value),
        ],
        lessons=make_lessons(COURSE_ID, 3),
    )


@pytest.fixture
def enrollment_repository() -> InMemoryEnrollmentRepository:
    return InMemoryEnrollmentRepository()


@pytest.fixture
def progress_repository() -> InMemoryProgressRepository:
    return InMemoryProgressRepository()


@pytest.fixture
def enrolled(enrollment_repository: InMemoryEnrollmentRepository) -> EnrollmentRecord:
    record = EnrollmentRecord(student_id=STUDENT_ID, course_id=COURSE_ID)
    enrollment_repository.records[(STUDENT_ID, COURSE_ID)] = record
    return record


@pytest.fixture
def services(
    app: FastAPI,
    lesson_service: FakeLessonService,
    enrollment_repository: InMemoryEnrollmentRepository,
    progress_repository: InMemoryProgressRepository,
) -> FastAPI:
    """Wire the in-memory services onto the app."""
    gate = EnrollmentGate(enrollment_repository)
    app.state.lesson_service = lesson_service
    app.state.enrollment_service = EnrollmentService(
        repository=enrollment_repository, lessons=lesson_service, gate=gate
    )
    app.state.progress_store = ProgressStore(
        repository=progress_repository, lessons=lesson_service
    )
    return app
