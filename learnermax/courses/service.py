"""Course catalog service layer (read side)."""

from typing import TYPE_CHECKING

import structlog

from .models import Course, Lesson


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class LessonService:
    """Read access to courses and their lessons."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE course_id = ?
        """)

        self._get_lesson = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons WHERE lesson_id = ?
        """)

        self._list_lessons = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons_by_course WHERE course_id = ?
        """)

        self._count_lessons = self.session.prepare(f"""
            SELECT COUNT(*) AS total FROM {self.keyspace}.lessons_by_course
            WHERE course_id = ?
        """)

    async def get_course(self, course_id: str) -> Course | None:
        result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def get_lesson(self, lesson_id: str) -> Lesson | None:
        """Get a lesson by id, including its internal video key."""
        result = await self.session.aexecute(self._get_lesson, [lesson_id])
        row = result.one()
        if not row:
            logger.warning("lesson_not_found", lesson_id=lesson_id)
            return None
        return Lesson.from_row(row)

    async def list_lessons(self, course_id: str) -> list[Lesson]:
        """List a course's lessons in display order."""
        result = await self.session.aexecute(self._list_lessons, [course_id])
        lessons = [Lesson.from_row(row) for row in result]
        logger.debug("lessons_listed", course_id=course_id, count=len(lessons))
        return lessons

    async def get_total_lessons(self, course_id: str) -> int:
        """Count a course's lessons. Used as the progress denominator."""
        result = await self.session.aexecute(self._count_lessons, [course_id])
        row = result.one()
        return int(row.total) if row else 0
