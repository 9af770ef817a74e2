from collections.abc import AsyncIterator
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..errors import UnsupportedBodyTypeError
from .blob import DEFAULT_CHUNK_SIZE, Blob


class BlobBody(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: Literal["blob"] = "blob"
    blob: Blob


class BufferBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["buffer"] = "buffer"
    data: bytes


class TextBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str
    """Plain text, a base64 string or a data url."""


FileBody = Annotated[BlobBody | BufferBody | TextBody, Field(discriminator="kind")]


def as_file_body(value: Any) -> BlobBody | BufferBody | TextBody:
    """Wrap a host value into the matching upload body variant.

    Raises:
        UnsupportedBodyTypeError: If the value is not a Blob, a byte buffer or a string.
    """
    if isinstance(value, BlobBody | BufferBody | TextBody):
        return value
    if isinstance(value, Blob):
        return BlobBody(blob=value)
    if isinstance(value, bytes | bytearray | memoryview):
        return BufferBody(data=bytes(value))
    if isinstance(value, str):
        return TextBody(text=value)
    raise UnsupportedBodyTypeError(f"Unsupported body type: {type(value).__name__}")


class BodyInfo(BaseModel):
    """Content type, exact byte size and transferable payload of an upload body."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    content_type: str
    size: int = Field(ge=0)
    payload: bytes | Blob

    async def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        if isinstance(self.payload, Blob):
            async for chunk in self.payload.iter_chunks(chunk_size):
                yield chunk
        else:
            yield self.payload

    def as_content(self) -> bytes | AsyncIterator[bytes]:
        """The payload in a form httpx can send: bytes as-is, file-backed blobs as a chunk stream."""
        if isinstance(self.payload, Blob):
            if self.payload.is_file:
                return self.iter_chunks()
            return self.payload.read()
        return self.payload
