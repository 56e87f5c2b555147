"""Enrollment service layer."""

import structlog

from learnermax.core.errors import NotFoundError, UnsupportedPricingModelError
from learnermax.courses.service import LessonService

from .gate import EnrollmentGate
from .models import EnrollmentRecord
from .repository import EnrollmentRepository
from .strategies import select_strategy


logger = structlog.get_logger(__name__)


class EnrollmentService:
    """Idempotent enrollment plus the read endpoints around it."""

    def __init__(
        self,
        repository: EnrollmentRepository,
        lessons: LessonService,
        gate: EnrollmentGate | None = None,
    ):
        self.repository = repository
        self.lessons = lessons
        self.gate = gate or EnrollmentGate(repository)

    async def enroll(self, student_id: str, course_id: str) -> EnrollmentRecord:
        """Enroll a student, returning the existing record when already enrolled.

        Raises:
            NotFoundError: Unknown course
            UnsupportedPricingModelError: Course has no enrollment strategy
        """
        existing = await self.repository.get(student_id, course_id)
        if existing:
            logger.info(
                "enrollment_exists",
                student_id=student_id,
                course_id=course_id,
                payment_status=existing.payment_status,
            )
            return existing

        course = await self.lessons.get_course(course_id)
        if course is None:
            raise NotFoundError(f"Course not found: {course_id}")

        try:
            strategy = select_strategy(course.pricing_model, self.repository)
        except UnsupportedPricingModelError:
            logger.warning(
                "enrollment_pricing_model_unsupported",
                course_id=course_id,
                pricing_model=course.pricing_model,
            )
            raise

        record = await strategy.enroll(student_id, course_id)
        logger.info(
            "user_enrolled",
            student_id=student_id,
            course_id=course_id,
            enrollment_type=record.enrollment_type,
        )
        return record

    async def check(self, student_id: str, course_id: str) -> bool:
        return await self.gate.is_enrolled(student_id, course_id)

    async def list_enrollments(self, student_id: str) -> list[EnrollmentRecord]:
        return await self.repository.list_by_student(student_id)
