"""Client-side playback: the lesson player state machine and completion tracking."""

from learnermax.player.client import LearnerMaxClient, ProgressSnapshot, VideoCredential
from learnermax.player.completion import CompletionCoordinator, CompletionState
from learnermax.player.controller import PlaybackController, PlaybackState
from learnermax.player.errors import PlaybackError
from learnermax.player.media import MediaElement, MediaError
from learnermax.player.progress_view import ProgressView
from learnermax.player.visit import LessonVisit


__all__ = [
    "CompletionCoordinator",
    "CompletionState",
    "LearnerMaxClient",
    "LessonVisit",
    "MediaElement",
    "MediaError",
    "PlaybackController",
    "PlaybackError",
    "PlaybackState",
    "ProgressSnapshot",
    "ProgressView",
    "VideoCredential",
]
