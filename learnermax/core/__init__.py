# Core infrastructure
from learnermax.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_user_id,
)
from learnermax.core.errors import (
    ConfigurationError,
    ErrorKind,
    ForbiddenError,
    LearnerMaxError,
    NotFoundError,
    UnsupportedPricingModelError,
    UpstreamError,
)
from learnermax.core.logging import configure_structlog, get_logger
from learnermax.core.middleware import RequestContextMiddleware


__all__ = [
    "ConfigurationError",
    "ErrorKind",
    "ForbiddenError",
    "LearnerMaxError",
    "NotFoundError",
    "RequestContextMiddleware",
    "UnsupportedPricingModelError",
    "UpstreamError",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_user_id",
    "set_request_id",
    "set_user_id",
]
