"""Error taxonomy shared by the API services and the playback client.

Every failure a student can run into while watching a lesson falls into one
of the ErrorKind buckets. Routers translate kinds into HTTP statuses and the
player translates them into the message shown next to the retry button.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a failure."""

    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONNECTIVITY = "connectivity"
    CONFIGURATION = "configuration"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class LearnerMaxError(Exception):
    """Base exception for LearnerMax domain errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, code: str = "LEARNERMAX_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class ForbiddenError(LearnerMaxError):
    """The caller is not allowed to access the resource (not enrolled)."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "Not enrolled in this course") -> None:
        super().__init__(message, "FORBIDDEN")


class NotFoundError(LearnerMaxError):
    """A lesson, course or record does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, "NOT_FOUND")


class ConfigurationError(LearnerMaxError):
    """Required deployment configuration is missing or unusable."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class UpstreamError(LearnerMaxError):
    """A backing service (secret store, database) could not be reached."""

    kind = ErrorKind.CONNECTIVITY

    def __init__(self, message: str) -> None:
        super().__init__(message, "UPSTREAM_UNAVAILABLE")


class UnsupportedPricingModelError(LearnerMaxError):
    """Enrollment for a pricing model that has no strategy yet."""

    kind = ErrorKind.UNSUPPORTED

    def __init__(self, pricing_model: str) -> None:
        self.pricing_model = pricing_model
        super().__init__(
            f"Enrollment for {pricing_model} courses is not available yet",
            "UNSUPPORTED_PRICING_MODEL",
        )


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONNECTIVITY: 502,
    ErrorKind.CONFIGURATION: 503,
    ErrorKind.UNSUPPORTED: 501,
    ErrorKind.UNKNOWN: 500,
}
