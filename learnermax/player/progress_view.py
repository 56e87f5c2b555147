"""Cached client-side view of a course's progress.

Reads are served from the last snapshot until it is invalidated, then the
next read refetches. Concurrent revalidations share one request, unless an
invalidation lands between them: a response to a request sent before the
latest invalidation never marks the view fresh.
"""

import asyncio
from collections.abc import Callable

import structlog

from .client import PlaybackApi, ProgressSnapshot
from .errors import PlaybackError


logger = structlog.get_logger(__name__)

Listener = Callable[[ProgressSnapshot], None]


class ProgressView:
    def __init__(self, api: PlaybackApi, course_id: str):
        self.api = api
        self.course_id = course_id
        self.snapshot: ProgressSnapshot | None = None
        self.stale = True
        # Bumped by every invalidate(); a fetch only counts for its own generation
        self._generation = 0
        self._inflight: asyncio.Task[ProgressSnapshot | None] | None = None
        self._inflight_generation = -1
        self._listeners: list[Listener] = []
        self._background: set[asyncio.Task] = set()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def invalidate(self) -> None:
        self._generation += 1
        self.stale = True

    async def get(self) -> ProgressSnapshot | None:
        if self.snapshot is not None and not self.stale:
            return self.snapshot
        return await self.revalidate()

    async def revalidate(self) -> ProgressSnapshot | None:
        """Refetch the snapshot. On failure the previous one is kept.

        Joins a request already in flight only if no invalidation happened
        since it started; otherwise a new request is sent.
        """
        if self._inflight is None or self._inflight_generation != self._generation:
            task = asyncio.ensure_future(self._fetch(self._generation))
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
            self._inflight_generation = self._generation
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _fetch(self, generation: int) -> ProgressSnapshot | None:
        try:
            snapshot = await self.api.get_progress(self.course_id)
        except PlaybackError as e:
            logger.warning(
                "progress_refresh_failed", course_id=self.course_id, kind=e.kind.value
            )
            return self.snapshot

        if generation != self._generation:
            # Started before the latest invalidation; may predate that write
            logger.debug(
                "progress_refresh_superseded",
                course_id=self.course_id,
                generation=generation,
                current=self._generation,
            )
            return snapshot

        self.snapshot = snapshot
        self.stale = False
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def is_lesson_completed(self, lesson_id: str) -> bool:
        return self.snapshot is not None and lesson_id in self.snapshot.completed_lessons

    def track_access(self, lesson_id: str) -> asyncio.Task:
        """Report a lesson open without waiting for the result."""
        task = asyncio.ensure_future(self._track_access(lesson_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _track_access(self, lesson_id: str) -> None:
        try:
            await self.api.track_access(self.course_id, lesson_id)
        except PlaybackError as e:
            logger.debug(
                "lesson_access_report_failed",
                course_id=self.course_id,
                lesson_id=lesson_id,
                kind=e.kind.value,
            )
