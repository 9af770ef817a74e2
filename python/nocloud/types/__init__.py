# ruff: noqa: F401
from .blob import Blob
from .body import BlobBody, BodyInfo, BufferBody, FileBody, TextBody, as_file_body
from .models import FileMetadata, SignedUrlResponse, UploadResponse
