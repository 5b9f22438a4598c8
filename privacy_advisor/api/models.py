"""API error taxonomy and version selection."""
from enum import Enum
from typing import Any, Optional


class ApiVersion(str, Enum):
    """Backend contract versions."""
    V1 = "v1"
    V2 = "v2"

    @property
    def prefix(self) -> str:
        return f"/api/{self.value}"

    @property
    def is_legacy(self) -> bool:
        return self is ApiVersion.V1


class ApiException(Exception):
    """Base class for every failure raised by the API layer."""
    pass


class HttpFailure(ApiException):
    """Non-2xx response from the scan service."""

    def __init__(
        self,
        message: str,
        status: int,
        body: Any = None,
        retry_after_ms: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.retry_after_ms = retry_after_ms

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class NotFoundError(HttpFailure):
    """Scan or report does not exist. Never retried."""
    pass


class RateLimitedError(HttpFailure):
    """HTTP 429 from the service."""
    pass


class RateLimitExhaustedError(ApiException):
    """Rate limiting persisted past the polling ceiling."""

    def __init__(self, message: str, last_failure: Optional[RateLimitedError] = None):
        super().__init__(message)
        self.message = message
        self.last_failure = last_failure


class SchemaError(ApiException):
    """Decoded body does not match the expected shape."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.payload = payload


class NetworkError(ApiException):
    """Transport level failure before any response arrived."""
    pass


def failure_class_for(status: int) -> type:
    """Pick the HttpFailure subclass for a status code."""
    if status == 404:
        return NotFoundError
    if status == 429:
        return RateLimitedError
    return HttpFailure


def is_transient(error: BaseException) -> bool:
    """Whether a failure is worth retrying without a backoff policy of its own."""
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, (NotFoundError, RateLimitedError)):
        return False
    return isinstance(error, HttpFailure) and error.status >= 500
