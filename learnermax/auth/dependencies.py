"""FastAPI dependencies for authentication."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from learnermax.auth.schemas import AuthenticatedUser
from learnermax.auth.security import decode_access_token
from learnermax.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract the Bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":  # noqa: PLR2004
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> AuthenticatedUser:
    """Get the authenticated student from the access token.

    Raises:
        HTTPException(401): If the token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user_id = payload["sub"]
    set_user_id(user_id)

    return AuthenticatedUser(
        id=user_id,
        email=payload.get("email", ""),
        role=payload.get("role", "student"),
    )


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
