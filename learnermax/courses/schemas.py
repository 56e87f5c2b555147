"""Pydantic schemas for the lesson catalog."""

from pydantic import BaseModel, ConfigDict, Field


class LessonResponse(BaseModel):
    """Lesson as returned to students. Never carries the video key."""

    model_config = ConfigDict(from_attributes=True)

    lesson_id: str
    course_id: str
    title: str
    description: str | None = None
    length_in_mins: int | None = None
    order: int
    hls_manifest_key: str | None = None
    is_completed: bool = Field(default=False, description="From the caller's progress")


class LessonListResponse(BaseModel):
    items: list[LessonResponse]
    total: int
