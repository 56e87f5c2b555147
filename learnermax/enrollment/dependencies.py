"""FastAPI dependencies for enrollment."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from learnermax.core.errors import STATUS_BY_KIND, LearnerMaxError

from .gate import EnrollmentGate
from .service import EnrollmentService


async def get_enrollment_service(request: Request) -> EnrollmentService:
    service = getattr(request.app.state, "enrollment_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrollment service not available",
        )
    return service


async def get_enrollment_gate(
    service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
) -> EnrollmentGate:
    return service.gate


EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
EnrollmentGateDep = Annotated[EnrollmentGate, Depends(get_enrollment_gate)]


def handle_enrollment_error(error: LearnerMaxError) -> HTTPException:
    """Convert a domain error into an HTTP exception by its kind."""
    return HTTPException(
        status_code=STATUS_BY_KIND[error.kind],
        detail=error.message,
    )
