"""Pydantic schemas for progress tracking."""

from datetime import datetime

from pydantic import BaseModel, Field

from .models import ProgressRecord


class MarkCompleteRequest(BaseModel):
    course_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)


class TrackAccessRequest(BaseModel):
    course_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)


class ProgressResponse(BaseModel):
    """A student's progress in one course."""

    course_id: str
    completed_lessons: list[str]
    last_accessed_lesson: str | None = None
    percentage: int = Field(..., ge=0)
    total_lessons: int
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: ProgressRecord) -> "ProgressResponse":
        return cls(
            course_id=record.course_id,
            completed_lessons=sorted(record.completed_lessons),
            last_accessed_lesson=record.last_accessed_lesson,
            percentage=record.percentage,
            total_lessons=record.total_lessons,
            updated_at=record.updated_at,
        )
