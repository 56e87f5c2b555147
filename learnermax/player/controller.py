"""Playback state machine for one lesson's media element.

    IDLE -> LOADING -> READY -> PLAYING <-> PAUSED
    LOADING -> ERROR -> (retry) LOADING

Opening a different lesson closes the current visit and starts over from
IDLE. There is no automatic retry.
"""

import asyncio
from collections.abc import Callable
from enum import StrEnum

import structlog

from .client import PlaybackApi, ProgressSnapshot, VideoCredential
from .completion import CompletionCoordinator
from .errors import PlaybackError
from .media import MediaElement, MediaError
from .progress_view import ProgressView
from .visit import LessonVisit


logger = structlog.get_logger(__name__)


class PlaybackState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


class PlaybackController:
    def __init__(
        self,
        api: PlaybackApi,
        media: MediaElement,
        progress: ProgressView,
        *,
        autoplay: bool = False,
        on_state_change: Callable[[PlaybackState], None] | None = None,
        on_lesson_complete: Callable[[ProgressSnapshot], None] | None = None,
        on_ready_to_complete: Callable[[], None] | None = None,
    ):
        self.api = api
        self.media = media
        self.progress = progress
        self.autoplay = autoplay
        self.on_state_change = on_state_change
        self.on_lesson_complete = on_lesson_complete
        self.on_ready_to_complete = on_ready_to_complete

        self.state = PlaybackState.IDLE
        self.error: PlaybackError | None = None
        self.credential: VideoCredential | None = None
        self.visit: LessonVisit | None = None
        self.completion: CompletionCoordinator | None = None
        self._hidden = False
        self._was_playing_before_hidden = False

    @property
    def error_message(self) -> str | None:
        return self.error.user_message if self.error else None

    def _set_state(self, state: PlaybackState) -> None:
        if state is self.state:
            return
        logger.debug("playback_state_changed", previous=self.state.value, state=state.value)
        self.state = state
        if self.on_state_change:
            self.on_state_change(state)

    # ------------------------------------------------------------------
    # Lesson lifecycle
    # ------------------------------------------------------------------

    async def open_lesson(
        self, lesson_id: str, course_id: str, *, is_last_lesson: bool = False
    ) -> None:
        """Switch to a lesson: reset, report access, fetch and load the video."""
        if course_id != self.progress.course_id:
            raise ValueError(
                f"Lesson {lesson_id} belongs to course {course_id}, "
                f"player is bound to {self.progress.course_id}"
            )
        self._end_visit()

        visit = LessonVisit(lesson_id, course_id, is_last_lesson)
        self.visit = visit
        self.completion = CompletionCoordinator(
            self.api,
            self.progress,
            visit,
            on_lesson_complete=self.on_lesson_complete,
            on_ready_to_complete=self.on_ready_to_complete,
        )

        self.progress.track_access(lesson_id)
        await self._load(visit)

    async def retry(self) -> bool:
        """Reload after an error, acquiring a fresh credential."""
        if self.state is not PlaybackState.ERROR or self.visit is None:
            return False
        await self._load(self.visit)
        return True

    def close(self) -> None:
        """Tear down the player. Playback is always paused."""
        self._end_visit()
        self.visit = None
        self.completion = None

    def _end_visit(self) -> None:
        if self.visit is not None:
            self.visit.close()
        if not self.media.paused:
            self.media.pause()
        self.credential = None
        self.error = None
        self._was_playing_before_hidden = False
        self._set_state(PlaybackState.IDLE)

    async def _load(self, visit: LessonVisit) -> None:
        self.error = None
        self._set_state(PlaybackState.LOADING)
        task = visit.spawn(self._fetch_and_load(visit))
        try:
            await task
        except asyncio.CancelledError:
            if visit.active:
                raise

    async def _fetch_and_load(self, visit: LessonVisit) -> None:
        try:
            credential = await self.api.get_video_url(visit.lesson_id)
        except PlaybackError as e:
            if visit.active:
                self._fail(e)
            return
        if not visit.active:
            return
        self.credential = credential

        try:
            await self.media.load(credential.url)
        except MediaError as e:
            if visit.active:
                self._fail(PlaybackError.media(str(e)))
            return
        if not visit.active:
            return

        self._set_state(PlaybackState.READY)
        if self.autoplay:
            await self.play()

    def _fail(self, error: PlaybackError) -> None:
        logger.warning(
            "lesson_playback_failed",
            lesson_id=self.visit.lesson_id if self.visit else None,
            kind=error.kind.value,
            status_code=error.status_code,
        )
        self.error = error
        self._set_state(PlaybackState.ERROR)

    def credential_expires_within(self, seconds: float) -> bool:
        return self.credential is not None and self.credential.expires_within(seconds)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def play(self) -> None:
        # Nothing starts in a hidden page, autoplay included
        if self._hidden or self.state not in (PlaybackState.READY, PlaybackState.PAUSED):
            return
        visit = self.visit
        try:
            await self.media.play()
        except MediaError as e:
            if visit is not None and visit.active:
                self._fail(PlaybackError.media(str(e)))
            return
        if visit is not None and visit.active:
            self._set_state(PlaybackState.PLAYING)

    def pause(self) -> None:
        if self.state not in (PlaybackState.READY, PlaybackState.PLAYING):
            return
        self.media.pause()
        self._set_state(PlaybackState.PAUSED)

    def on_time_update(self) -> asyncio.Task | None:
        """Forward the media position to the completion coordinator."""
        if self.completion is None or self.state not in (
            PlaybackState.PLAYING,
            PlaybackState.PAUSED,
        ):
            return None
        return self.completion.on_position(self.media.current_time, self.media.duration)

    def on_media_error(self, detail: str = "") -> None:
        if self.visit is not None and self.state is not PlaybackState.IDLE:
            self._fail(PlaybackError.media(detail))

    def confirm_completion(self) -> asyncio.Task | None:
        return self.completion.confirm() if self.completion else None

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    async def on_visibility_change(self, hidden: bool) -> None:
        """Page hidden or shown. Resume only if it was playing when hidden."""
        if hidden:
            self._hidden = True
            # Native controls can pause the element without telling us
            self._was_playing_before_hidden = not self.media.paused
            self.pause()
            if not self.media.paused:
                self.media.pause()
            return

        self._hidden = False
        if self._was_playing_before_hidden:
            self._was_playing_before_hidden = False
            await self.play()

    def on_intersection_change(self, visible: bool, *, fullscreen: bool = False) -> None:
        """Player scrolled in or out of the viewport. Ignored in full screen."""
        if fullscreen or visible:
            return
        self.pause()
