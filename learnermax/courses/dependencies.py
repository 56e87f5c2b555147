"""FastAPI dependencies for the course catalog."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import LessonService


async def get_lesson_service(request: Request) -> LessonService:
    """Get lesson service from app state."""
    lesson_service = getattr(request.app.state, "lesson_service", None)
    if lesson_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lesson catalog not available",
        )
    return lesson_service


LessonServiceDep = Annotated[LessonService, Depends(get_lesson_service)]
