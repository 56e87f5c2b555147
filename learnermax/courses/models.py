"""Database models for the course catalog.

Lessons are stored twice: clustered under their course (ordered listing and
counting) and keyed by lesson id (lookup when issuing a video credential).
"""

from enum import StrEnum
from typing import Any


class PricingModel(StrEnum):
    """How a course is sold. Drives the enrollment strategy."""

    FREE = "free"
    PAID = "paid"
    BUNDLE = "bundle"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    course_id TEXT PRIMARY KEY,
    name TEXT,
    description TEXT,
    pricing_model TEXT
)
"""

# Partition per course, clustered by display order
LESSONS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons_by_course (
    course_id TEXT,
    lesson_order INT,
    lesson_id TEXT,
    title TEXT,
    description TEXT,
    length_in_mins INT,
    video_key TEXT,
    hls_manifest_key TEXT,
    PRIMARY KEY ((course_id), lesson_order, lesson_id)
) WITH CLUSTERING ORDER BY (lesson_order ASC, lesson_id ASC)
"""

LESSONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons (
    lesson_id TEXT PRIMARY KEY,
    course_id TEXT,
    lesson_order INT,
    title TEXT,
    description TEXT,
    length_in_mins INT,
    video_key TEXT,
    hls_manifest_key TEXT
)
"""

COURSES_TABLES_CQL = [
    COURSE_TABLE_CQL,
    LESSONS_BY_COURSE_TABLE_CQL,
    LESSONS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Course:
    """Course entity."""

    def __init__(
        self,
        course_id: str,
        name: str,
        description: str = "",
        pricing_model: str = PricingModel.FREE.value,
    ):
        self.course_id = course_id
        self.name = name
        self.description = description
        self.pricing_model = pricing_model

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        return cls(
            course_id=row.course_id,
            name=row.name or "",
            description=row.description or "",
            pricing_model=row.pricing_model or PricingModel.FREE.value,
        )

    def __repr__(self) -> str:
        return f"<Course {self.course_id} ({self.pricing_model})>"


class Lesson:
    """A single video lesson within a course.

    Attributes:
        lesson_id: Lesson identifier (e.g. "lesson-1")
        course_id: Parent course
        title: Lesson title
        description: Optional long description
        length_in_mins: Optional duration
        order: Display order within the course, starting at 1
        video_key: Object key of the MP4 on the distribution, None until uploaded.
            Server-only.
        hls_manifest_key: Object key of the HLS manifest, when encoded
    """

    def __init__(
        self,
        lesson_id: str,
        course_id: str,
        title: str,
        order: int,
        video_key: str | None,
        description: str | None = None,
        length_in_mins: int | None = None,
        hls_manifest_key: str | None = None,
    ):
        self.lesson_id = lesson_id
        self.course_id = course_id
        self.title = title
        self.order = order
        self.video_key = video_key
        self.description = description
        self.length_in_mins = length_in_mins
        self.hls_manifest_key = hls_manifest_key

    @classmethod
    def from_row(cls, row: Any) -> "Lesson":
        return cls(
            lesson_id=row.lesson_id,
            course_id=row.course_id,
            title=row.title or "",
            order=row.lesson_order or 0,
            video_key=row.video_key,
            description=row.description,
            length_in_mins=row.length_in_mins,
            hls_manifest_key=row.hls_manifest_key,
        )

    def to_dict(self) -> dict[str, Any]:
        """Public representation. ``video_key`` is intentionally left out."""
        return {
            "lesson_id": self.lesson_id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "length_in_mins": self.length_in_mins,
            "order": self.order,
            "hls_manifest_key": self.hls_manifest_key,
        }

    def __repr__(self) -> str:
        return f"<Lesson {self.lesson_id} course={self.course_id} #{self.order}>"
