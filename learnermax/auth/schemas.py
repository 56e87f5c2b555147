"""Authenticated caller model."""

from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """Claims extracted from a validated access token."""

    id: str = Field(..., description="Student id (token subject)")
    email: str = Field(default="", description="E-mail claim")
    role: str = Field(default="student", description="Role claim")
