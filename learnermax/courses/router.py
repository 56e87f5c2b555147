"""Lesson catalog API endpoints."""

from fastapi import APIRouter

from learnermax.auth.dependencies import CurrentUser
from learnermax.core.errors import LearnerMaxError, NotFoundError
from learnermax.enrollment.dependencies import EnrollmentGateDep, handle_enrollment_error
from learnermax.progress.dependencies import ProgressStoreDep

from .dependencies import LessonServiceDep
from .schemas import LessonListResponse, LessonResponse


router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.get("/{course_id}/lessons", response_model=LessonListResponse)
async def list_course_lessons(
    course_id: str,
    user: CurrentUser,
    gate: EnrollmentGateDep,
    lessons: LessonServiceDep,
    progress: ProgressStoreDep,
) -> LessonListResponse:
    """List a course's lessons in order, flagged with the caller's completion."""
    try:
        await gate.require(user.id, course_id)
        if await lessons.get_course(course_id) is None:
            raise NotFoundError(f"Course not found: {course_id}")
    except LearnerMaxError as e:
        raise handle_enrollment_error(e) from e

    items = await lessons.list_lessons(course_id)
    record = await progress.get(user.id, course_id)

    return LessonListResponse(
        items=[
            LessonResponse(**lesson.to_dict(), is_completed=record.is_completed(lesson.lesson_id))
            for lesson in items
        ],
        total=len(items),
    )
