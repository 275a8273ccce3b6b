"""Custom exception hierarchy for the maps relay."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of every failure the relay can report."""

    MISSING_TARGET = "missing_target"
    INVALID_TARGET = "invalid_target"
    INVALID_BODY = "invalid_body"
    REQUEST_TOO_LARGE = "request_too_large"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"


class ProxyError(Exception):
    """Base exception for all relay errors.

    Attributes:
        kind: ErrorKind of the failure
        status_code: HTTP status returned to the caller
        detail: Original error text, for logs only
    """

    kind: ErrorKind
    status_code: int = 502

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    @property
    def public_message(self) -> str:
        """Message placed in the JSON error body."""
        return self.message


class RequestRejected(ProxyError):
    """Inbound request is unusable; nothing was sent upstream."""

    status_code = 400


class MissingTargetError(RequestRejected):
    """No usable target URL found in the request."""

    kind = ErrorKind.MISSING_TARGET

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Missing url", detail)


class InvalidTargetError(RequestRejected):
    """Target URL is outside the allow-list."""

    kind = ErrorKind.INVALID_TARGET

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Invalid url", detail)


class InvalidBodyError(RequestRejected):
    """Forwarded body is not a raw string."""

    kind = ErrorKind.INVALID_BODY

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Invalid body", detail)


class RequestTooLargeError(RequestRejected):
    """Request body exceeds size limit."""

    kind = ErrorKind.REQUEST_TOO_LARGE
    status_code = 413

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Request body too large", detail)


class UpstreamFailure(ProxyError):
    """The outbound call did not produce a usable response."""

    status_code = 502

    @property
    def public_message(self) -> str:
        return f"Proxy failed: {self.message}"


class UpstreamError(UpstreamFailure):
    """Raised when the upstream API answers outside [200, 300).

    Attributes:
        upstream_status: HTTP status code from upstream
    """

    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, upstream_status: int, detail: str | None = None) -> None:
        super().__init__(f"HTTP {upstream_status}", detail)
        self.upstream_status = upstream_status


class UpstreamTimeoutError(UpstreamFailure):
    """Raised when the outbound call exceeds its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Timeout", detail)


class UpstreamConnectionError(UpstreamFailure):
    """Raised on DNS, connection or protocol failure before any response."""

    kind = ErrorKind.TRANSPORT_ERROR
