"""Enrollment API endpoints."""

from fastapi import APIRouter, status

from learnermax.auth.dependencies import CurrentUser
from learnermax.core.errors import LearnerMaxError

from .dependencies import EnrollmentServiceDep, handle_enrollment_error
from .schemas import (
    EnrollmentCheckResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
    EnrollResultResponse,
)


router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=EnrollResultResponse,
    status_code=status.HTTP_201_CREATED,
)
async def enroll(
    data: EnrollRequest,
    user: CurrentUser,
    service: EnrollmentServiceDep,
) -> EnrollResultResponse:
    """Enroll the caller in a course.

    Idempotent: enrolling twice returns the existing enrollment.
    """
    try:
        record = await service.enroll(user.id, data.course_id)
    except LearnerMaxError as e:
        raise handle_enrollment_error(e) from e

    return EnrollResultResponse(
        enrollment=EnrollmentResponse.model_validate(record),
        status="pending" if not record.grants_access else "active",
    )


@router.get("", response_model=EnrollmentListResponse)
async def list_enrollments(
    user: CurrentUser,
    service: EnrollmentServiceDep,
) -> EnrollmentListResponse:
    """List the caller's enrollments."""
    records = await service.list_enrollments(user.id)
    return EnrollmentListResponse(
        items=[EnrollmentResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/check/{course_id}", response_model=EnrollmentCheckResponse)
async def check_enrollment(
    course_id: str,
    user: CurrentUser,
    service: EnrollmentServiceDep,
) -> EnrollmentCheckResponse:
    """Check whether the caller may access a course."""
    return EnrollmentCheckResponse(enrolled=await service.check(user.id, course_id))
