"""Turns playback positions into a single "lesson watched" event.

The per-visit state flips synchronously, before any await, so a burst of
position updates past the threshold produces exactly one request.
"""

import asyncio
import math
from collections.abc import Callable
from enum import StrEnum

import structlog

from .client import PlaybackApi, ProgressSnapshot
from .errors import PlaybackError
from .progress_view import ProgressView
from .visit import LessonVisit


logger = structlog.get_logger(__name__)

COMPLETION_THRESHOLD = 0.9


class CompletionState(StrEnum):
    WATCHING = "watching"
    IN_FLIGHT = "in_flight"
    COMMITTED = "committed"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class CompletionCoordinator:
    """Completion guard for one lesson visit.

    The final lesson of a course is never completed automatically: crossing
    the threshold emits ``on_ready_to_complete`` and the request is only sent
    once :meth:`confirm` is called.
    """

    def __init__(
        self,
        api: PlaybackApi,
        progress: ProgressView,
        visit: LessonVisit,
        *,
        on_lesson_complete: Callable[[ProgressSnapshot], None] | None = None,
        on_ready_to_complete: Callable[[], None] | None = None,
        on_error: Callable[[PlaybackError], None] | None = None,
    ):
        self.api = api
        self.progress = progress
        self.visit = visit
        self.on_lesson_complete = on_lesson_complete
        self.on_ready_to_complete = on_ready_to_complete
        self.on_error = on_error
        self.state = CompletionState.WATCHING

    def on_position(self, position: float, duration: float) -> asyncio.Task | None:
        """Feed a playback position. Returns the completion task, if one started."""
        if not (position > 0 and duration > 0) or math.isinf(duration):
            return None
        if self.state is not CompletionState.WATCHING:
            return None
        if position / duration < COMPLETION_THRESHOLD:
            return None

        if self.visit.is_last_lesson:
            self.state = CompletionState.AWAITING_CONFIRMATION
            logger.debug("final_lesson_ready", lesson_id=self.visit.lesson_id)
            if self.on_ready_to_complete:
                self.on_ready_to_complete()
            return None

        self.state = CompletionState.IN_FLIGHT
        return self.visit.spawn(self._submit(), cancel_on_close=False)

    def confirm(self) -> asyncio.Task | None:
        """Complete the final lesson after the student confirms."""
        if self.state is not CompletionState.AWAITING_CONFIRMATION:
            return None
        self.state = CompletionState.IN_FLIGHT
        return self.visit.spawn(self._submit(), cancel_on_close=False)

    async def _submit(self) -> ProgressSnapshot | None:
        visit = self.visit
        try:
            snapshot = await self.api.mark_complete(visit.course_id, visit.lesson_id)
        except PlaybackError as e:
            logger.warning(
                "lesson_completion_failed",
                course_id=visit.course_id,
                lesson_id=visit.lesson_id,
                kind=e.kind.value,
            )
            self.state = (
                CompletionState.AWAITING_CONFIRMATION
                if visit.is_last_lesson
                else CompletionState.WATCHING
            )
            if visit.active and self.on_error:
                self.on_error(e)
            return None

        # The server has applied it either way; the cached view is now wrong
        self.progress.invalidate()
        self.state = CompletionState.COMMITTED
        if not visit.active:
            return snapshot

        logger.info(
            "lesson_completed",
            course_id=visit.course_id,
            lesson_id=visit.lesson_id,
            percentage=snapshot.percentage,
        )
        await self.progress.revalidate()
        if visit.active and self.on_lesson_complete:
            self.on_lesson_complete(snapshot)
        return snapshot
