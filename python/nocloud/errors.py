from enum import Enum
from typing import Any


class NoCloudError(Exception):
    """Base class for all NoCloud errors."""

class APIKeyNotFoundError(NoCloudError):
    """Error raised when an API key is not found."""


class ErrorCode(str, Enum):
    INVALID_API_KEY = "INVALID_API_KEY"
    BAD_REQUEST = "BAD_REQUEST"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Canonical HTTP status for each error code.
_CODE_STATUS = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.INVALID_API_KEY: 401,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.RATE_LIMIT_EXCEEDED: 429,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
    ErrorCode.NETWORK_ERROR: 503,
    ErrorCode.UNKNOWN_ERROR: 500,
}

_STATUS_CODE = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.INVALID_API_KEY,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
    500: ErrorCode.INTERNAL_SERVER_ERROR,
}


class NoCloudAPIError(NoCloudError):
    """Error raised when a NoCloud API call fails.

    Always carries the HTTP status of the failed call, even when the error code
    had to be inferred from it.
    """

    def __init__(self, message: str, status: int, code: ErrorCode) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = ErrorCode(code)

    def __str__(self) -> str:
        return f"[{self.status} {self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status}, code={self.code.value})"

    @classmethod
    def is_error(cls, value: Any, code: ErrorCode | None = None) -> bool:
        """Check whether value is an instance of this error class, optionally with a specific code."""
        if not isinstance(value, cls):
            return False
        if code is not None and value.code != code:
            return False
        return True

    @classmethod
    def from_code(cls, code: ErrorCode | str, message: str) -> "NoCloudAPIError":
        """Build an error for the given code, using the code's canonical HTTP status."""
        try:
            code = ErrorCode(code)
        except ValueError:
            return cls(message, 500, ErrorCode.INTERNAL_SERVER_ERROR)
        return cls(message, _CODE_STATUS[code], code)

    @classmethod
    def from_status(cls, status: int, message: str) -> "NoCloudAPIError":
        """Build an error for the given HTTP status. Unmapped statuses get UNKNOWN_ERROR."""
        return cls(message, status, _STATUS_CODE.get(status, ErrorCode.UNKNOWN_ERROR))


class UnsupportedBodyTypeError(NoCloudAPIError):
    """Error raised when an upload body is not a blob, a byte buffer or a string."""

    def __init__(self, message: str = "Unsupported body type", status: int = 400, code: ErrorCode = ErrorCode.BAD_REQUEST) -> None:
        super().__init__(message, status, code)


class InvalidBase64Error(NoCloudAPIError):
    """Error raised when a base64 data url carries a payload that cannot be decoded."""

    def __init__(self, message: str = "Invalid base64 payload", status: int = 400, code: ErrorCode = ErrorCode.BAD_REQUEST) -> None:
        super().__init__(message, status, code)


class ControlPlaneError(NoCloudAPIError):
    """Error raised when the NoCloud API answers with a non-2xx status."""


class BatchDeleteError(NoCloudAPIError):
    """Error raised when one batch of a bulk delete fails.

    Batches before `batch_index` were deleted, batches after it were never sent.
    Callers can resume from `offset` in the id list they passed in. The status and
    code are those of the failing batch's ControlPlaneError or TransportError,
    which is chained as __cause__.
    """

    def __init__(
        self,
        message: str,
        status: int,
        code: ErrorCode,
        batch_index: int,
        batch_count: int,
        offset: int,
        ids: list[str],
    ) -> None:
        super().__init__(message, status, code)
        self.batch_index = batch_index
        self.batch_count = batch_count
        self.offset = offset
        self.ids = ids


class TransportError(NoCloudAPIError):
    """Error raised when a request cannot reach the server (after retries, if any)."""

    def __init__(self, message: str, status: int = 503, code: ErrorCode = ErrorCode.NETWORK_ERROR) -> None:
        super().__init__(message, status, code)


class UploadFailedError(NoCloudAPIError):
    """Error raised when the object store rejects the upload of a file."""

class StreamUploadFailedError(UploadFailedError):
    """Error raised when the object store rejects the upload of a stream."""
