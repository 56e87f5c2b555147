"""Cassandra access for course progress."""

from datetime import datetime
from typing import TYPE_CHECKING

from .models import ProgressRecord


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ProgressRepository:
    """Reads and writes the course_progress table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.course_progress
            WHERE student_id = ? AND course_id = ?
        """)

        self._insert_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_progress
            (student_id, course_id, completed_lessons, last_accessed_lesson,
             percentage, total_lessons, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        # Blind overwrite of the recomputed record (last writer wins)
        self._save = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_progress
            (student_id, course_id, completed_lessons, last_accessed_lesson,
             percentage, total_lessons, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._update_access = self.session.prepare(f"""
            UPDATE {self.keyspace}.course_progress
            SET last_accessed_lesson = ?, updated_at = ?
            WHERE student_id = ? AND course_id = ?
        """)

    @staticmethod
    def _values(record: ProgressRecord) -> list:
        return [
            record.student_id,
            record.course_id,
            record.completed_lessons,
            record.last_accessed_lesson,
            record.percentage,
            record.total_lessons,
            record.updated_at,
        ]

    async def get(self, student_id: str, course_id: str) -> ProgressRecord | None:
        result = await self.session.aexecute(self._get, [student_id, course_id])
        row = result.one()
        return ProgressRecord.from_row(row) if row else None

    async def insert_if_absent(self, record: ProgressRecord) -> bool:
        """Create the record unless one exists. Returns whether it was created."""
        result = await self.session.aexecute(self._insert_if_absent, self._values(record))
        return bool(result.was_applied)

    async def save(self, record: ProgressRecord) -> None:
        await self.session.aexecute(self._save, self._values(record))

    async def update_access(
        self,
        student_id: str,
        course_id: str,
        lesson_id: str,
        updated_at: datetime,
    ) -> None:
        """Set only the last accessed lesson and timestamp."""
        await self.session.aexecute(
            self._update_access, [lesson_id, updated_at, student_id, course_id]
        )
