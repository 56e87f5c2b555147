"""Enrollment gate: may this student access this course's media?"""

import structlog

from learnermax.core.errors import ForbiddenError

from .repository import EnrollmentRepository


logger = structlog.get_logger(__name__)


class EnrollmentGate:
    """Side-effect free enrollment predicate.

    Deliberately uncached: a student who just enrolled must be let in on the
    very next request.
    """

    def __init__(self, repository: EnrollmentRepository):
        self.repository = repository

    async def is_enrolled(self, student_id: str, course_id: str) -> bool:
        record = await self.repository.get(student_id, course_id)
        enrolled = record is not None and record.grants_access
        logger.debug(
            "enrollment_checked",
            student_id=student_id,
            course_id=course_id,
            enrolled=enrolled,
            payment_status=record.payment_status if record else None,
        )
        return enrolled

    async def require(self, student_id: str, course_id: str) -> None:
        """Raise ForbiddenError unless the student is enrolled."""
        if not await self.is_enrolled(student_id, course_id):
            logger.warning(
                "course_access_denied", student_id=student_id, course_id=course_id
            )
            raise ForbiddenError()
