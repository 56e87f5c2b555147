"""Database models for course enrollment."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class EnrollmentType(StrEnum):
    FREE = "free"
    PAID = "paid"
    BUNDLE = "bundle"


class PaymentStatus(StrEnum):
    FREE = "free"
    PENDING = "pending"
    COMPLETED = "completed"


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# One row per (student, course). The partition holds every enrollment of a
# student, so listing "my courses" is a single-partition read.
ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    student_id TEXT,
    course_id TEXT,
    enrollment_type TEXT,
    payment_status TEXT,
    enrolled_at TIMESTAMP,
    PRIMARY KEY ((student_id), course_id)
)
"""

ENROLLMENT_TABLES_CQL = [ENROLLMENTS_TABLE_CQL]


class EnrollmentRecord:
    """A student's enrollment in a course.

    Attributes:
        student_id: Enrolled student
        course_id: Course enrolled in
        enrollment_type: free, paid or bundle
        payment_status: free, pending or completed
        enrolled_at: Creation timestamp
    """

    def __init__(
        self,
        student_id: str,
        course_id: str,
        enrollment_type: str = EnrollmentType.FREE.value,
        payment_status: str = PaymentStatus.FREE.value,
        enrolled_at: datetime | None = None,
    ):
        self.student_id = student_id
        self.course_id = course_id
        self.enrollment_type = enrollment_type
        self.payment_status = payment_status
        self.enrolled_at = ensure_utc_aware(enrolled_at) or datetime.now(UTC)

    @property
    def grants_access(self) -> bool:
        """A pending payment does not unlock the course."""
        return self.payment_status != PaymentStatus.PENDING.value

    @classmethod
    def from_row(cls, row: Any) -> "EnrollmentRecord":
        return cls(
            student_id=row.student_id,
            course_id=row.course_id,
            enrollment_type=row.enrollment_type or EnrollmentType.FREE.value,
            payment_status=row.payment_status or PaymentStatus.FREE.value,
            enrolled_at=row.enrolled_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "course_id": self.course_id,
            "enrollment_type": self.enrollment_type,
            "payment_status": self.payment_status,
            "enrolled_at": self.enrolled_at,
        }

    def __repr__(self) -> str:
        return (
            f"<EnrollmentRecord student={self.student_id} course={self.course_id} "
            f"{self.enrollment_type}/{self.payment_status}>"
        )
