"""Async HTTP client for the playback path of the LearnerMax API."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol, TypeVar

import httpx
import structlog

from learnermax.core.errors import ErrorKind

from .errors import PlaybackError


logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class VideoCredential:
    url: str
    expires_at: datetime

    def expires_within(self, seconds: float, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return (self.expires_at - now).total_seconds() <= seconds


@dataclass(frozen=True)
class ProgressSnapshot:
    """Client-side copy of a progress record."""

    course_id: str
    completed_lessons: frozenset[str]
    percentage: int
    total_lessons: int
    last_accessed_lesson: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ProgressSnapshot":
        return cls(
            course_id=data["course_id"],
            completed_lessons=frozenset(data.get("completed_lessons") or ()),
            percentage=data.get("percentage", 0),
            total_lessons=data.get("total_lessons", 0),
            last_accessed_lesson=data.get("last_accessed_lesson"),
            updated_at=data.get("updated_at"),
        )


class PlaybackApi(Protocol):
    async def get_video_url(self, lesson_id: str) -> VideoCredential: ...

    async def get_progress(self, course_id: str) -> ProgressSnapshot: ...

    async def mark_complete(self, course_id: str, lesson_id: str) -> ProgressSnapshot: ...

    async def track_access(self, course_id: str, lesson_id: str) -> None: ...


class LearnerMaxClient:
    """httpx-based implementation of :class:`PlaybackApi`.

    Every failure is raised as a classified :class:`PlaybackError`.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LearnerMaxClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise PlaybackError(ErrorKind.CONNECTIVITY, str(e)) from e
        except httpx.HTTPError as e:
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PlaybackError(ErrorKind.UNKNOWN, str(e)) from e

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "api_request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise PlaybackError.from_status(response.status_code, detail)

        return response

    @staticmethod
    def _decode(response: httpx.Response, parse: Callable[[Any], T]) -> T:
        """Parse a success body. Anything unexpected is an unknown failure."""
        try:
            return parse(response.json())
        except (ValueError, KeyError, TypeError, OverflowError) as e:
            logger.warning(
                "api_response_malformed",
                path=response.url.path,
                status_code=response.status_code,
                error_type=type(e).__name__,
            )
            raise PlaybackError(
                ErrorKind.UNKNOWN,
                "Unexpected response from the API",
                status_code=response.status_code,
            ) from e

    async def get_video_url(self, lesson_id: str) -> VideoCredential:
        response = await self._request("GET", f"/v1/lessons/{lesson_id}/video-url")
        return self._decode(response, _video_credential)

    async def get_progress(self, course_id: str) -> ProgressSnapshot:
        response = await self._request("GET", f"/v1/progress/{course_id}")
        return self._decode(response, ProgressSnapshot.from_json)

    async def mark_complete(self, course_id: str, lesson_id: str) -> ProgressSnapshot:
        response = await self._request(
            "POST", "/v1/progress", json={"course_id": course_id, "lesson_id": lesson_id}
        )
        return self._decode(response, ProgressSnapshot.from_json)

    async def track_access(self, course_id: str, lesson_id: str) -> None:
        await self._request(
            "POST",
            "/v1/progress/access",
            json={"course_id": course_id, "lesson_id": lesson_id},
        )


def _video_credential(data: dict[str, Any]) -> VideoCredential:
    return VideoCredential(
        url=data["video_url"],
        expires_at=datetime.fromtimestamp(data["expires_at"], tz=UTC),
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or "")
    return ""
