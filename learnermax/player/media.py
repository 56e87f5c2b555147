"""The media element the controller drives.

A browser <video>, a native player or a test double all fit this shape.
"""

from typing import Protocol


class MediaError(Exception):
    """The element could not load or decode the source."""


class MediaElement(Protocol):
    @property
    def paused(self) -> bool: ...

    @property
    def current_time(self) -> float: ...

    @property
    def duration(self) -> float: ...

    async def load(self, url: str) -> None:
        """Load ``url`` and resolve once metadata is available.

        Raises:
            MediaError: On network or decode failure
        """
        ...

    async def play(self) -> None: ...

    def pause(self) -> None: ...
