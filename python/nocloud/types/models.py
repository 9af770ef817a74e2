from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

FileMetadata = dict[str, str | int | float | bool]
"""Opaque user tags attached to an upload. Passed through to the API verbatim."""


class SignedUrlResponse(BaseModel):
    """Grant returned by the NoCloud API for uploading a single file.

    The url is single-use and expires at `expires_at`. `media_id` is the durable
    handle of the uploaded file, used later to delete it.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str
    """The signed URL to PUT the file content to."""
    expires_at: datetime = Field(alias="expiresAt")
    """Expiration time of the signed URL."""
    media_id: str = Field(alias="mediaId")
    """The unique identifier of the media once uploaded."""
    media_url: str = Field(alias="mediaUrl")
    """The public URL to access the media once uploaded."""


class UploadResponse(BaseModel):
    """Result of a successful upload."""

    model_config = ConfigDict(frozen=True)

    id: str
    """The unique identifier of the uploaded file."""
    url: str
    """The public URL where the uploaded file can be accessed."""
