"""FastAPI dependencies for video delivery."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from learnermax.core.errors import STATUS_BY_KIND, LearnerMaxError

from .service import CredentialIssuer


async def get_credential_issuer(request: Request) -> CredentialIssuer:
    issuer = getattr(request.app.state, "credential_issuer", None)
    if issuer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Video delivery not available",
        )
    return issuer


CredentialIssuerDep = Annotated[CredentialIssuer, Depends(get_credential_issuer)]


def handle_video_error(error: LearnerMaxError) -> HTTPException:
    """Convert credential errors to HTTP exceptions.

    Configuration problems surface as 503 with a generic message; the
    details are only in the logs.
    """
    status_code = STATUS_BY_KIND[error.kind]
    detail = error.message
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        detail = "Video delivery temporarily unavailable"
    return HTTPException(status_code=status_code, detail=detail)
