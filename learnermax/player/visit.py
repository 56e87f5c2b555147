"""Per-lesson cancellation scope.

A visit starts when a lesson is opened and ends when another lesson is
opened or the player closes. Work started for a visit must check
``visit.active`` after every await before touching player state.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import structlog


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class LessonVisit:
    def __init__(self, lesson_id: str, course_id: str, is_last_lesson: bool = False):
        self.lesson_id = lesson_id
        self.course_id = course_id
        self.is_last_lesson = is_last_lesson
        self._closed = False
        self._cancellable: set[asyncio.Task] = set()
        self._detached: set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return not self._closed

    def spawn(
        self, coro: Coroutine[Any, Any, T], *, cancel_on_close: bool = True
    ) -> "asyncio.Task[T]":
        """Run ``coro`` as a task owned by this visit.

        Tasks spawned with ``cancel_on_close=False`` keep running after the
        visit closes; they are expected to check ``active`` themselves.
        """
        task = asyncio.ensure_future(coro)
        tasks = self._cancellable if cancel_on_close else self._detached
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        return task

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for task in list(self._cancellable):
            task.cancel()
        logger.debug(
            "lesson_visit_closed",
            lesson_id=self.lesson_id,
            cancelled=len(self._cancellable),
            detached=len(self._detached),
        )

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"<LessonVisit {self.course_id}/{self.lesson_id} {state}>"
