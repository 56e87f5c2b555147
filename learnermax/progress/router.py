"""Student progress API endpoints.

Every endpoint requires enrollment in the course; a student who is not
enrolled gets 403, never an empty record.
"""

from fastapi import APIRouter, BackgroundTasks, status

from learnermax.auth.dependencies import CurrentUser
from learnermax.core.errors import LearnerMaxError, NotFoundError
from learnermax.courses.dependencies import LessonServiceDep
from learnermax.courses.service import LessonService
from learnermax.enrollment.dependencies import EnrollmentGateDep

from .dependencies import ProgressStoreDep, handle_progress_error
from .schemas import MarkCompleteRequest, ProgressResponse, TrackAccessRequest


router = APIRouter(prefix="/v1/progress", tags=["progress"])


async def ensure_lesson_in_course(
    lessons: LessonService, course_id: str, lesson_id: str
) -> None:
    lesson = await lessons.get_lesson(lesson_id)
    if lesson is None or lesson.course_id != course_id:
        raise NotFoundError(f"Lesson {lesson_id} not found in course {course_id}")


@router.get("/{course_id}", response_model=ProgressResponse)
async def get_progress(
    course_id: str,
    user: CurrentUser,
    gate: EnrollmentGateDep,
    store: ProgressStoreDep,
) -> ProgressResponse:
    """Get the caller's progress in a course (empty progress if not started)."""
    try:
        await gate.require(user.id, course_id)
    except LearnerMaxError as e:
        raise handle_progress_error(e) from e

    record = await store.get(user.id, course_id)
    return ProgressResponse.from_record(record)


@router.post("", response_model=ProgressResponse)
async def mark_lesson_complete(
    data: MarkCompleteRequest,
    user: CurrentUser,
    gate: EnrollmentGateDep,
    lessons: LessonServiceDep,
    store: ProgressStoreDep,
) -> ProgressResponse:
    """Mark a lesson complete. Safe to repeat."""
    try:
        await gate.require(user.id, data.course_id)
        await ensure_lesson_in_course(lessons, data.course_id, data.lesson_id)
    except LearnerMaxError as e:
        raise handle_progress_error(e) from e

    total = await lessons.get_total_lessons(data.course_id)
    record = await store.mark_complete(user.id, data.course_id, data.lesson_id, total)
    return ProgressResponse.from_record(record)


@router.post("/access", status_code=status.HTTP_202_ACCEPTED)
async def track_lesson_access(
    data: TrackAccessRequest,
    user: CurrentUser,
    gate: EnrollmentGateDep,
    lessons: LessonServiceDep,
    store: ProgressStoreDep,
    background_tasks: BackgroundTasks,
) -> dict[str, bool]:
    """Record that a lesson was opened. Runs after the response is sent."""
    try:
        await gate.require(user.id, data.course_id)
        await ensure_lesson_in_course(lessons, data.course_id, data.lesson_id)
    except LearnerMaxError as e:
        raise handle_progress_error(e) from e

    background_tasks.add_task(
        store.touch_access, user.id, data.course_id, data.lesson_id
    )
    return {"accepted": True}
