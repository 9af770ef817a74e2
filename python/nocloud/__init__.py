# ruff: noqa: F401
from .body import inspect_body
from .client import NoCloud
from .config import NoCloudConfig
from .errors import (
    APIKeyNotFoundError,
    BatchDeleteError,
    ControlPlaneError,
    ErrorCode,
    InvalidBase64Error,
    NoCloudAPIError,
    NoCloudError,
    StreamUploadFailedError,
    TransportError,
    UnsupportedBodyTypeError,
    UploadFailedError,
)
from .logs import setup_logging
from .storage import Storage
from .types import (
    Blob,
    BodyInfo,
    FileBody,
    FileMetadata,
    SignedUrlResponse,
    UploadResponse,
)

try:
    from ._version import __version__  # type: ignore
except ImportError:
    __version__ = "0.0.0.dev0"
