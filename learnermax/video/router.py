"""Playback credential API endpoints."""

from fastapi import APIRouter

from learnermax.auth.dependencies import CurrentUser
from learnermax.core.errors import LearnerMaxError

from .dependencies import CredentialIssuerDep, handle_video_error
from .schemas import VideoAccessResponse, VideoUrlResponse


router = APIRouter(prefix="/v1", tags=["video"])


@router.get("/lessons/{lesson_id}/video-url", response_model=VideoUrlResponse)
async def get_video_url(
    lesson_id: str,
    user: CurrentUser,
    issuer: CredentialIssuerDep,
) -> VideoUrlResponse:
    """Signed URL for a lesson's video. Requires enrollment."""
    try:
        credential = await issuer.issue_video_url(user.id, lesson_id)
    except LearnerMaxError as e:
        raise handle_video_error(e) from e

    return VideoUrlResponse(video_url=credential.url, expires_at=credential.expires_at_epoch)


@router.get("/courses/{course_id}/video-access", response_model=VideoAccessResponse)
async def get_video_access(
    course_id: str,
    user: CurrentUser,
    issuer: CredentialIssuerDep,
) -> VideoAccessResponse:
    """Signed cookies for HLS playback of a course. Requires enrollment."""
    try:
        credential = await issuer.issue_cookies(user.id, course_id)
    except LearnerMaxError as e:
        raise handle_video_error(e) from e

    return VideoAccessResponse(
        cookies=credential.cookies,
        resource=credential.resource,
        expires_at=credential.expires_at_epoch,
    )
