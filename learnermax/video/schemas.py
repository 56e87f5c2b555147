"""Pydantic schemas for playback credentials."""

from pydantic import BaseModel, Field


class VideoUrlResponse(BaseModel):
    video_url: str = Field(..., description="Signed CloudFront URL")
    expires_at: int = Field(..., description="Expiry as Unix seconds")


class VideoAccessResponse(BaseModel):
    """Signed cookie values for HLS playback under a course prefix."""

    cookies: dict[str, str]
    resource: str
    expires_at: int = Field(..., description="Expiry as Unix seconds")
