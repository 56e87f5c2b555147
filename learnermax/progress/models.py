"""Database model for per-student course progress.

One row per (student, course). ``completed_lessons`` is a CQL set, so marking
the same lesson twice cannot grow it.
"""

from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


# ==============================================================================
# Helper Functions
# ==============================================================================


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def calculate_percentage(completed: int, total: int) -> int:
    """Whole-number completion percentage, rounding halves up.

    ``total == 0`` yields 0 rather than dividing by zero.
    """
    if total <= 0:
        return 0
    value = Decimal(100 * completed) / Decimal(total)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def next_updated_at(previous: datetime | None, now: datetime | None = None) -> datetime:
    """Timestamp for the next write of a record.

    Cassandra stores milliseconds, so the value is truncated to the
    millisecond and bumped past ``previous`` when the clock has not moved
    (or moved backwards) since the last write.
    """
    now = now or datetime.now(UTC)
    now = now.replace(microsecond=(now.microsecond // 1000) * 1000)
    previous = ensure_utc_aware(previous)
    if previous is not None and now <= previous:
        return previous + timedelta(milliseconds=1)
    return now


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_progress (
    student_id TEXT,
    course_id TEXT,
    completed_lessons SET<TEXT>,
    last_accessed_lesson TEXT,
    percentage INT,
    total_lessons INT,
    updated_at TIMESTAMP,
    PRIMARY KEY ((student_id), course_id)
)
"""

PROGRESS_TABLES_CQL = [COURSE_PROGRESS_TABLE_CQL]


# ==============================================================================
# Entity Classes
# ==============================================================================


class ProgressRecord:
    """A student's progress through one course.

    Attributes:
        student_id: Student
        course_id: Course
        completed_lessons: Ids of lessons watched past the threshold
        last_accessed_lesson: Most recently opened or completed lesson
        percentage: round_half_up(100 * completed / total), 0 when total is 0
        total_lessons: Denominator used for ``percentage``
        updated_at: Last write, strictly increasing per record
    """

    def __init__(
        self,
        student_id: str,
        course_id: str,
        completed_lessons: set[str] | None = None,
        last_accessed_lesson: str | None = None,
        percentage: int = 0,
        total_lessons: int = 0,
        updated_at: datetime | None = None,
    ):
        self.student_id = student_id
        self.course_id = course_id
        self.completed_lessons = set(completed_lessons or ())
        self.last_accessed_lesson = last_accessed_lesson
        self.percentage = percentage
        self.total_lessons = total_lessons
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def empty(cls, student_id: str, course_id: str, total_lessons: int) -> "ProgressRecord":
        """The "no progress yet" record."""
        return cls(student_id=student_id, course_id=course_id, total_lessons=total_lessons)

    def is_completed(self, lesson_id: str) -> bool:
        return lesson_id in self.completed_lessons

    def recalculate(self) -> None:
        self.percentage = calculate_percentage(
            len(self.completed_lessons), self.total_lessons
        )

    @classmethod
    def from_row(cls, row: Any) -> "ProgressRecord":
        return cls(
            student_id=row.student_id,
            course_id=row.course_id,
            completed_lessons=set(row.completed_lessons or ()),
            last_accessed_lesson=row.last_accessed_lesson,
            percentage=row.percentage or 0,
            total_lessons=row.total_lessons or 0,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "course_id": self.course_id,
            "completed_lessons": sorted(self.completed_lessons),
            "last_accessed_lesson": self.last_accessed_lesson,
            "percentage": self.percentage,
            "total_lessons": self.total_lessons,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProgressRecord":
        updated_at = data.get("updated_at")
        return cls(
            student_id=data["student_id"],
            course_id=data["course_id"],
            completed_lessons=set(data.get("completed_lessons") or ()),
            last_accessed_lesson=data.get("last_accessed_lesson"),
            percentage=data.get("percentage", 0),
            total_lessons=data.get("total_lessons", 0),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord student={self.student_id} course={self.course_id} "
            f"{len(self.completed_lessons)}/{self.total_lessons} {self.percentage}%>"
        )
