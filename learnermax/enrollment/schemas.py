"""Pydantic schemas for enrollment."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EnrollRequest(BaseModel):
    course_id: str = Field(..., min_length=1, description="Course to enroll in")


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: str
    course_id: str
    enrollment_type: str
    payment_status: str
    enrolled_at: datetime


class EnrollResultResponse(BaseModel):
    """Outcome of an enroll call. ``pending`` is reserved for paid checkout."""

    enrollment: EnrollmentResponse
    status: str = "active"


class EnrollmentListResponse(BaseModel):
    items: list[EnrollmentResponse]
    total: int


class EnrollmentCheckResponse(BaseModel):
    enrolled: bool
