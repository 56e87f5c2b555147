"""FastAPI dependencies for progress tracking."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from learnermax.core.errors import STATUS_BY_KIND, LearnerMaxError

from .service import ProgressStore


async def get_progress_store(request: Request) -> ProgressStore:
    """Get progress store from app state."""
    store = getattr(request.app.state, "progress_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return store


ProgressStoreDep = Annotated[ProgressStore, Depends(get_progress_store)]


def handle_progress_error(error: LearnerMaxError) -> HTTPException:
    """Convert progress errors to HTTP exceptions."""
    return HTTPException(status_code=STATUS_BY_KIND[error.kind], detail=error.message)
