"""Enrollment strategies, selected by a course's pricing model.

Only free enrollment exists today. Paid and bundle courses need checkout,
which this service does not implement, so they have no strategy.
"""

from datetime import UTC, datetime
from typing import Protocol

import structlog

from learnermax.core.errors import UnsupportedPricingModelError
from learnermax.courses.models import PricingModel

from .models import EnrollmentRecord, EnrollmentType, PaymentStatus
from .repository import EnrollmentRepository


logger = structlog.get_logger(__name__)


class EnrollmentStrategy(Protocol):
    async def enroll(self, student_id: str, course_id: str) -> EnrollmentRecord: ...


class FreeEnrollmentStrategy:
    """Enroll immediately with no payment."""

    def __init__(self, repository: EnrollmentRepository):
        self.repository = repository

    async def enroll(self, student_id: str, course_id: str) -> EnrollmentRecord:
        record = EnrollmentRecord(
            student_id=student_id,
            course_id=course_id,
            enrollment_type=EnrollmentType.FREE.value,
            payment_status=PaymentStatus.FREE.value,
            enrolled_at=datetime.now(UTC),
        )
        stored = await self.repository.insert_if_absent(record)
        logger.info("free_enrollment_completed", student_id=student_id, course_id=course_id)
        return stored


def select_strategy(
    pricing_model: str, repository: EnrollmentRepository
) -> EnrollmentStrategy:
    """Pick the strategy for a pricing model.

    Raises:
        UnsupportedPricingModelError: For paid, bundle and unknown models
    """
    if pricing_model == PricingModel.FREE.value:
        return FreeEnrollmentStrategy(repository)
    raise UnsupportedPricingModelError(pricing_model)
