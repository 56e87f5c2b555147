"""Cassandra access for enrollment records."""

from typing import TYPE_CHECKING

import structlog

from .models import EnrollmentRecord


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class EnrollmentRepository:
    """Reads and writes the enrollments table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE student_id = ? AND course_id = ?
        """)

        self._list_by_student = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments WHERE student_id = ?
        """)

        # Lightweight transaction: concurrent enrolls serialize on the row
        self._insert_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (student_id, course_id, enrollment_type, payment_status, enrolled_at)
            VALUES (?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

    async def get(self, student_id: str, course_id: str) -> EnrollmentRecord | None:
        result = await self.session.aexecute(self._get, [student_id, course_id])
        row = result.one()
        return EnrollmentRecord.from_row(row) if row else None

    async def list_by_student(self, student_id: str) -> list[EnrollmentRecord]:
        result = await self.session.aexecute(self._list_by_student, [student_id])
        return [EnrollmentRecord.from_row(row) for row in result]

    async def insert_if_absent(self, record: EnrollmentRecord) -> EnrollmentRecord:
        """Create the record unless one already exists.

        Returns:
            The stored record: ``record`` when the insert applied, otherwise
            the row that won the race.
        """
        result = await self.session.aexecute(
            self._insert_if_absent,
            [
                record.student_id,
                record.course_id,
                record.enrollment_type,
                record.payment_status,
                record.enrolled_at,
            ],
        )

        if result.was_applied:
            return record

        # A non-applied LWT returns the existing row's values
        logger.info(
            "enrollment_already_exists",
            student_id=record.student_id,
            course_id=record.course_id,
        )
        existing = result.one()
        if existing is not None and getattr(existing, "course_id", None):
            return EnrollmentRecord.from_row(existing)
        return await self.get(record.student_id, record.course_id) or record
