"""Playback failures and the messages shown for them."""

from learnermax.core.errors import ErrorKind


SIGN_IN_MESSAGE = "Please sign in to continue"
MEDIA_ERROR_MESSAGE = (
    "Unable to play this video. Try again or contact support if the issue persists"
)

USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.FORBIDDEN: "Please enroll in this course to watch lessons",
    ErrorKind.NOT_FOUND: "This lesson is not available",
    ErrorKind.CONNECTIVITY: "Connection failed. Check your internet and try again",
}
DEFAULT_MESSAGE = "Failed to load video"


def classify_status(status_code: int) -> ErrorKind:
    """Map an HTTP error status onto an error kind."""
    if status_code in (401, 403):
        return ErrorKind.FORBIDDEN
    if status_code == 404:  # noqa: PLR2004
        return ErrorKind.NOT_FOUND
    if status_code in (502, 503, 504):
        return ErrorKind.CONNECTIVITY
    return ErrorKind.UNKNOWN


class PlaybackError(Exception):
    """Any failure on the playback path, already classified."""

    def __init__(
        self,
        kind: ErrorKind,
        detail: str = "",
        *,
        status_code: int | None = None,
        user_message: str | None = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        if user_message is None:
            user_message = (
                SIGN_IN_MESSAGE
                if status_code == 401  # noqa: PLR2004
                else USER_MESSAGES.get(kind, DEFAULT_MESSAGE)
            )
        self.user_message = user_message
        super().__init__(detail or user_message)

    @classmethod
    def from_status(cls, status_code: int, detail: str = "") -> "PlaybackError":
        return cls(classify_status(status_code), detail, status_code=status_code)

    @classmethod
    def media(cls, detail: str = "") -> "PlaybackError":
        """The media element failed to load or decode the video."""
        return cls(ErrorKind.UNKNOWN, detail, user_message=MEDIA_ERROR_MESSAGE)
