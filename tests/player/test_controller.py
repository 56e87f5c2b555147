"""Tests for the PlaybackController state machine."""

import asyncio

import pytest

from learnermax.core.errors import ErrorKind
from learnermax.player.controller import PlaybackController, PlaybackState
from learnermax.player.errors import MEDIA_ERROR_MESSAGE, PlaybackError
from learnermax.player.media import MediaError
from learnermax.player.progress_view import ProgressView

from tests.fakes import FakeMedia, FakePlaybackApi, forbidden


@pytest.fixture
def api() -> FakePlaybackApi:
    return FakePlaybackApi()


@pytest.fixture
def media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def states() -> list[PlaybackState]:
    return []


@pytest.fixture
def controller(
    api: FakePlaybackApi, media: FakeMedia, states: list[PlaybackState]
) -> PlaybackController:
    return PlaybackController(
        api, media, ProgressView(api, "course-1"), on_state_change=states.append
    )


async def playing(controller: PlaybackController, lesson_id: str = "lesson-1") -> None:
    await controller.open_lesson(lesson_id, "course-1")
    await controller.play()


class TestOpenLesson:
    """Loading a lesson."""

    @pytest.mark.asyncio
    async def test_loads_signed_url(
        self,
        controller: PlaybackController,
        api: FakePlaybackApi,
        media: FakeMedia,
        states: list[PlaybackState],
    ) -> None:
        """Fetches a credential, loads it and reports access."""
        await controller.open_lesson("lesson-1", "course-1")

        assert states == [PlaybackState.LOADING, PlaybackState.READY]
        assert media.loaded == ["https://cdn.example.com/lesson-1.mp4?Signature=x"]
        assert api.access_calls == [("course-1", "lesson-1")]
        assert controller.credential is not None
        assert media.paused is True

    @pytest.mark.asyncio
    async def test_autoplay(self, api: FakePlaybackApi, media: FakeMedia) -> None:
        """With autoplay the lesson starts playing once ready."""
        controller = PlaybackController(
            api, media, ProgressView(api, "course-1"), autoplay=True
        )
        await controller.open_lesson("lesson-1", "course-1")

        assert controller.state is PlaybackState.PLAYING
        assert media.paused is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "message"),
        [
            (forbidden(), "Please enroll in this course to watch lessons"),
            (PlaybackError.from_status(404), "This lesson is not available"),
            (
                PlaybackError(ErrorKind.CONNECTIVITY),
                "Connection failed. Check your internet and try again",
            ),
            (PlaybackError.from_status(401), "Please sign in to continue"),
        ],
    )
    async def test_credential_errors(
        self,
        controller: PlaybackController,
        api: FakePlaybackApi,
        media: FakeMedia,
        error: PlaybackError,
        message: str,
    ) -> None:
        """Each failure kind shows its own message."""
        api.video_url_error = error

        await controller.open_lesson("lesson-1", "course-1")

        assert controller.state is PlaybackState.ERROR
        assert controller.error_message == message
        assert media.loaded == []

    @pytest.mark.asyncio
    async def test_media_error(
        self, controller: PlaybackController, media: FakeMedia
    ) -> None:
        """A decode failure uses the generic media message."""
        media.load_error = MediaError("MEDIA_ERR_DECODE")

        await controller.open_lesson("lesson-1", "course-1")

        assert controller.state is PlaybackState.ERROR
        assert controller.error_message == MEDIA_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_switching_lessons_discards_stale_fetch(
        self, controller: PlaybackController, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """A slow credential for the old lesson never reaches the player."""
        api.video_url_gate = asyncio.Event()
        first = asyncio.ensure_future(controller.open_lesson("lesson-1", "course-1"))
        while not api.video_url_calls:
            await asyncio.sleep(0)

        api.video_url_gate = None
        await controller.open_lesson("lesson-2", "course-1")
        await first

        assert controller.state is PlaybackState.READY
        assert controller.visit.lesson_id == "lesson-2"
        assert media.loaded == ["https://cdn.example.com/lesson-2.mp4?Signature=x"]

    @pytest.mark.asyncio
    async def test_lesson_from_another_course_is_rejected(
        self, controller: PlaybackController, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """The player is bound to one course; a foreign lesson is refused up front."""
        with pytest.raises(ValueError, match="course-2"):
            await controller.open_lesson("lesson-9", "course-2")
        await asyncio.sleep(0)

        assert controller.state is PlaybackState.IDLE
        assert controller.visit is None
        assert api.access_calls == []
        assert api.video_url_calls == []
        assert media.loaded == []


class TestRetry:
    """Manual retry after an error."""

    @pytest.mark.asyncio
    async def test_retry_from_error(
        self, controller: PlaybackController, api: FakePlaybackApi
    ) -> None:
        """Retry fetches a fresh credential."""
        api.video_url_error = PlaybackError(ErrorKind.CONNECTIVITY)
        await controller.open_lesson("lesson-1", "course-1")

        api.video_url_error = None
        assert await controller.retry() is True

        assert controller.state is PlaybackState.READY
        assert controller.error is None
        assert api.video_url_calls == ["lesson-1", "lesson-1"]

    @pytest.mark.asyncio
    async def test_retry_outside_error_is_ignored(
        self, controller: PlaybackController, api: FakePlaybackApi
    ) -> None:
        """Retry only applies to the error state."""
        await controller.open_lesson("lesson-1", "course-1")

        assert await controller.retry() is False
        assert api.video_url_calls == ["lesson-1"]


class TestPlayback:
    """Play, pause and completion."""

    @pytest.mark.asyncio
    async def test_play_pause(self, controller: PlaybackController, media: FakeMedia) -> None:
        """Play and pause move between PLAYING and PAUSED."""
        await playing(controller)
        assert controller.state is PlaybackState.PLAYING

        controller.pause()
        assert controller.state is PlaybackState.PAUSED
        assert media.paused is True

        await controller.play()
        assert controller.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_time_update_completes_lesson(
        self, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """Watching past 90% marks the lesson complete once."""
        completed = []
        controller = PlaybackController(
            api, media, ProgressView(api, "course-1"), on_lesson_complete=completed.append
        )
        await playing(controller)

        media.current_time = 50.0
        assert controller.on_time_update() is None

        media.current_time = 92.0
        task = controller.on_time_update()
        assert controller.on_time_update() is None
        await task

        assert api.mark_calls == [("course-1", "lesson-1")]
        assert len(completed) == 1

    @pytest.mark.asyncio
    async def test_time_update_ignored_before_playback(
        self, controller: PlaybackController, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """Position updates only count once playback has started."""
        await controller.open_lesson("lesson-1", "course-1")
        media.current_time = 95.0

        assert controller.on_time_update() is None
        assert api.mark_calls == []

    @pytest.mark.asyncio
    async def test_final_lesson_confirmation(
        self, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """The last lesson completes only after confirmation."""
        ready = []
        controller = PlaybackController(
            api,
            media,
            ProgressView(api, "course-1"),
            on_ready_to_complete=lambda: ready.append(True),
        )
        await controller.open_lesson("lesson-3", "course-1", is_last_lesson=True)
        await controller.play()

        media.current_time = 95.0
        assert controller.on_time_update() is None
        assert ready == [True]
        assert api.mark_calls == []

        await controller.confirm_completion()
        assert api.mark_calls == [("course-1", "lesson-3")]

    @pytest.mark.asyncio
    async def test_media_error_during_playback(
        self, controller: PlaybackController
    ) -> None:
        """A playback-time media error moves to ERROR."""
        await playing(controller)

        controller.on_media_error("network")

        assert controller.state is PlaybackState.ERROR
        assert controller.error_message == MEDIA_ERROR_MESSAGE


class TestVisibility:
    """Page visibility and viewport changes."""

    @pytest.mark.asyncio
    async def test_resumes_if_it_was_playing(
        self, controller: PlaybackController, media: FakeMedia
    ) -> None:
        """Hiding pauses; showing resumes playback that was running."""
        await playing(controller)

        await controller.on_visibility_change(hidden=True)
        assert controller.state is PlaybackState.PAUSED
        assert media.paused is True

        await controller.on_visibility_change(hidden=False)
        assert controller.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_stays_paused_if_paused_before(
        self, controller: PlaybackController
    ) -> None:
        """Showing the page never starts playback the student paused."""
        await playing(controller)
        controller.pause()

        await controller.on_visibility_change(hidden=True)
        await controller.on_visibility_change(hidden=False)

        assert controller.state is PlaybackState.PAUSED

    @pytest.mark.asyncio
    async def test_scrolled_out_pauses(self, controller: PlaybackController) -> None:
        """Leaving the viewport pauses."""
        await playing(controller)

        controller.on_intersection_change(False)

        assert controller.state is PlaybackState.PAUSED

    @pytest.mark.asyncio
    async def test_fullscreen_ignores_intersection(
        self, controller: PlaybackController
    ) -> None:
        """Intersection changes are ignored in full screen."""
        await playing(controller)

        controller.on_intersection_change(False, fullscreen=True)

        assert controller.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_hidden_during_load_skips_autoplay(
        self, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """A lesson that finishes loading in a hidden tab does not start playing."""
        controller = PlaybackController(
            api, media, ProgressView(api, "course-1"), autoplay=True
        )
        api.video_url_gate = asyncio.Event()
        opening = asyncio.ensure_future(controller.open_lesson("lesson-1", "course-1"))
        while not api.video_url_calls:
            await asyncio.sleep(0)

        await controller.on_visibility_change(hidden=True)
        api.video_url_gate.set()
        await opening

        assert controller.state is PlaybackState.READY
        assert media.paused is True

        await controller.on_visibility_change(hidden=False)
        assert controller.state is PlaybackState.READY
        assert media.paused is True

    @pytest.mark.asyncio
    async def test_native_pause_is_not_resumed(
        self, controller: PlaybackController, media: FakeMedia
    ) -> None:
        """A pause from the native controls survives hiding and showing."""
        await playing(controller)
        media.pause()

        await controller.on_visibility_change(hidden=True)
        await controller.on_visibility_change(hidden=False)

        assert media.paused is True
        assert controller.state is PlaybackState.PAUSED


class TestClose:
    """Tearing down the player."""

    @pytest.mark.asyncio
    async def test_close_pauses(
        self, controller: PlaybackController, media: FakeMedia
    ) -> None:
        """Closing always stops playback."""
        await playing(controller)

        controller.close()

        assert media.paused is True
        assert controller.state is PlaybackState.IDLE
        assert controller.visit is None

    @pytest.mark.asyncio
    async def test_completion_in_flight_survives_lesson_switch(
        self, controller: PlaybackController, api: FakePlaybackApi, media: FakeMedia
    ) -> None:
        """A completion sent before switching still reaches the server."""
        await playing(controller)
        api.mark_gate = asyncio.Event()
        media.current_time = 95.0
        task = controller.on_time_update()
        await asyncio.sleep(0)

        await controller.open_lesson("lesson-2", "course-1")
        api.mark_gate.set()
        await task

        assert "lesson-1" in api.completed
        assert controller.visit.lesson_id == "lesson-2"
        assert controller.state is PlaybackState.READY


class TestCourseWalkthrough:
    """A student watching a three-lesson course end to end."""

    @pytest.mark.asyncio
    async def test_three_lessons(self, api: FakePlaybackApi, media: FakeMedia) -> None:
        """L1 and L2 complete on their own; L3 waits for confirmation."""
        percentages: list[int] = []
        ready: list[str] = []
        progress = ProgressView(api, "course-1")
        controller = PlaybackController(
            api,
            media,
            progress,
            on_lesson_complete=lambda snapshot: percentages.append(snapshot.percentage),
            on_ready_to_complete=lambda: ready.append(controller.visit.lesson_id),
        )

        for lesson_id in ("lesson-1", "lesson-2"):
            await playing(controller, lesson_id)
            media.current_time = 95.0
            await controller.on_time_update()

        assert percentages == [33, 67]

        await controller.open_lesson("lesson-3", "course-1", is_last_lesson=True)
        await controller.play()
        media.current_time = 95.0
        assert controller.on_time_update() is None
        assert ready == ["lesson-3"]
        assert len(api.mark_calls) == 2

        await controller.confirm_completion()

        assert percentages == [33, 67, 100]
        assert progress.snapshot.percentage == 100
        assert progress.is_lesson_completed("lesson-3")
