# =============================================================================
# core/errors.py  —  Error Taxonomy for the 115 Driver Core
# =============================================================================
#
# Every failure the core can produce is one of these exception types.
# Nothing here is retried or recovered: the client raises, the tool layer
# turns the exception into an error payload for the agent.
#
#   DriverError
#     ├── DecodeError       a wire scalar could not be decoded
#     ├── ValidationError   the caller left out a required argument
#     └── APIError          the remote call failed
#           kind = TRANSPORT    network / connection failure
#           kind = HTTP_STATUS  non-2xx response
#           kind = API_STATE    HTTP 200 whose body reports a failure
# =============================================================================

from enum import Enum
from typing import Any, Optional


class DriverError(Exception):
    """Base class for every error raised by the core."""


class DecodeError(DriverError):
    """A wire token could not be decoded into its field's canonical type."""

    def __init__(self, field: str, raw: Any, reason: str = "") -> None:
        self.field = field
        self.raw = raw
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"cannot decode field {field or '<unnamed>'!r} from {raw!r}{detail}")


class ValidationError(DriverError):
    """A required option was missing or empty."""


class APIErrorKind(str, Enum):
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    API_STATE = "api_state"


class APIError(DriverError):
    """A classified failure of one remote call.

    Only the attributes relevant to ``kind`` are populated:
      - TRANSPORT:   ``cause`` holds the underlying exception
      - HTTP_STATUS: ``status`` holds the HTTP status code
      - API_STATE:   ``code`` and ``message`` come from the response body
    """

    def __init__(
        self,
        kind: APIErrorKind,
        *,
        code: int = 0,
        message: str = "",
        status: int = 0,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.kind = kind
        self.code = code
        self.message = message
        self.status = status
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind is APIErrorKind.TRANSPORT:
            return f"transport error: {self.cause}"
        if self.kind is APIErrorKind.HTTP_STATUS:
            return f"unexpected HTTP status {self.status}"
        if self.message:
            return f"api error {self.code}: {self.message}"
        return f"api error {self.code}"

    @classmethod
    def transport(cls, cause: BaseException) -> "APIError":
        return cls(APIErrorKind.TRANSPORT, cause=cause)

    @classmethod
    def http_status(cls, status: int) -> "APIError":
        return cls(APIErrorKind.HTTP_STATUS, status=status, code=status)

    @classmethod
    def api_state(cls, code: int, message: str) -> "APIError":
        return cls(APIErrorKind.API_STATE, code=code, message=message)
