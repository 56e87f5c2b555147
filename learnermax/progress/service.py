"""Progress store: the source of truth for lesson completion.

Writes are blind overwrites of a recomputed record. Concurrent completions
are last-writer-wins, and because ``completed_lessons`` is unioned before
every write, replaying a completion never changes the outcome.
"""

from datetime import UTC, datetime

import structlog

from learnermax.courses.service import LessonService

from .cache import ProgressCache
from .models import ProgressRecord, next_updated_at
from .repository import ProgressRepository


logger = structlog.get_logger(__name__)


class ProgressStore:
    """Durable per-student, per-course progress."""

    def __init__(
        self,
        repository: ProgressRepository,
        lessons: LessonService,
        cache: ProgressCache | None = None,
    ):
        self.repository = repository
        self.lessons = lessons
        self.cache = cache or ProgressCache(None)

    async def get(self, student_id: str, course_id: str) -> ProgressRecord:
        """Return the student's progress, or an empty record if none exists."""
        cached = await self.cache.get(student_id, course_id)
        if cached is not None:
            return cached

        record = await self.repository.get(student_id, course_id)
        if record is None:
            total = await self.lessons.get_total_lessons(course_id)
            # Absence is not cached: the first write creates the row
            return ProgressRecord.empty(student_id, course_id, total)

        await self.cache.set(record)
        return record

    async def touch_access(self, student_id: str, course_id: str, lesson_id: str) -> None:
        """Record that a lesson was opened.

        Creates the record with defaults when absent, then updates only
        ``last_accessed_lesson`` and ``updated_at``. Completion data is never
        touched. Best-effort: failures are logged, never raised.
        """
        try:
            record = await self.repository.get(student_id, course_id)
            if record is None:
                total = await self.lessons.get_total_lessons(course_id)
                record = ProgressRecord.empty(student_id, course_id, total)
                record.updated_at = next_updated_at(None)
                created = await self.repository.insert_if_absent(record)
                if not created:
                    # Lost the creation race; continue from the winner's row
                    record = await self.repository.get(student_id, course_id) or record

            await self.repository.update_access(
                student_id,
                course_id,
                lesson_id,
                next_updated_at(record.updated_at),
            )
            await self.cache.invalidate(student_id, course_id)
            logger.debug(
                "lesson_access_tracked",
                student_id=student_id,
                course_id=course_id,
                lesson_id=lesson_id,
            )
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "lesson_access_tracking_failed",
                student_id=student_id,
                course_id=course_id,
                lesson_id=lesson_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def mark_complete(
        self,
        student_id: str,
        course_id: str,
        lesson_id: str,
        total_lessons: int | None = None,
    ) -> ProgressRecord:
        """Add a lesson to the completed set and persist the recomputed record.

        Args:
            student_id: Student
            course_id: Course the lesson belongs to
            lesson_id: Lesson watched past the threshold
            total_lessons: Course lesson count; looked up when omitted

        Returns:
            The record as written

        Failures propagate to the caller.
        """
        if total_lessons is None:
            total_lessons = await self.lessons.get_total_lessons(course_id)

        existing = await self.repository.get(student_id, course_id)
        record = existing or ProgressRecord.empty(student_id, course_id, total_lessons)

        already_completed = record.is_completed(lesson_id)
        record.completed_lessons.add(lesson_id)
        record.total_lessons = total_lessons
        record.last_accessed_lesson = lesson_id
        record.recalculate()
        record.updated_at = next_updated_at(
            existing.updated_at if existing else None, datetime.now(UTC)
        )

        await self.repository.save(record)
        await self.cache.invalidate(student_id, course_id)

        logger.info(
            "lesson_marked_complete",
            student_id=student_id,
            course_id=course_id,
            lesson_id=lesson_id,
            completed=len(record.completed_lessons),
            total=total_lessons,
            percentage=record.percentage,
            replay=already_completed,
        )
        return record
