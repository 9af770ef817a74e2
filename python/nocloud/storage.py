import json
from collections.abc import AsyncIterable, Iterable, Sequence
from typing import IO, Any
from urllib.parse import quote

import httpx
import structlog

from .body import inspect_body
from .errors import (
    BatchDeleteError,
    ControlPlaneError,
    NoCloudAPIError,
    StreamUploadFailedError,
    TransportError,
    UploadFailedError,
)
from .module import SDKModule
from .resolvers import resolve_json_response
from .types.models import FileMetadata, SignedUrlResponse, UploadResponse
from .utils import aiter_bytes, redact_url

logger = structlog.get_logger("nocloud.storage")

DELETE_BATCH_SIZE = 100


class Storage(SDKModule):
    """Storage module for handling file storage operations."""

    async def generate_signed_url(
        self,
        content_type: str,
        size: int,
        metadata: FileMetadata | None = None,
    ) -> SignedUrlResponse:
        """Generate a signed URL for uploading a file.

        Args:
            content_type: The MIME type of the file.
            size: The exact size of the file in bytes.
            metadata: Optional metadata associated with the file.

        Returns:
            SignedUrlResponse: The signed URL, its expiration time and the future media id and url.

        Raises:
            NoCloudAPIError: If the arguments are invalid (400).
            ControlPlaneError: If the API rejects the request.
            TransportError: If the API cannot be reached.
        """
        if not content_type:
            raise NoCloudAPIError.from_status(400, "Content type is required")
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise NoCloudAPIError.from_status(400, f"Invalid size: {size!r}")

        params: dict[str, Any] = {"contentType": content_type, "size": str(size)}
        if metadata:
            params["metadata"] = json.dumps(metadata, separators=(",", ":"))

        res = await self._fetch("storage/signed-url", params=params)
        signed_url = resolve_json_response(res, SignedUrlResponse)
        logger.debug(
            "Signed URL issued.",
            media_id=signed_url.media_id,
            expires_at=signed_url.expires_at.isoformat(),
        )
        return signed_url


    async def _put(
        self,
        url: str,
        content: Any,
        content_type: str,
        content_length: int,
        error_cls: type[UploadFailedError],
        error_prefix: str,
    ) -> None:
        """PUT content straight to the object store. No auth header and no retries:
        the signed URL authorizes a single transfer."""
        headers = {
            "Content-Type": content_type,
            "Content-Length": str(content_length),
        }
        try:
            async with self._transport.client() as client:
                res = await client.put(url, headers=headers, content=content)
        except httpx.TransportError as exc:
            raise TransportError(f"{error_prefix}: {exc!r}") from exc

        if not res.is_success:
            try:
                error_text = res.text or res.reason_phrase
            except httpx.StreamError:
                error_text = res.reason_phrase
            logger.debug("Object store rejected upload.", url=redact_url(url), status_code=res.status_code)
            raise error_cls.from_status(res.status_code, f"{error_prefix}: {error_text}")


    async def upload(
        self,
        body: Any,
        metadata: FileMetadata | None = None,
    ) -> UploadResponse:
        """Upload a file to the object store through a signed URL.

        Args:
            body: The file body. A Blob, a byte buffer (bytes, bytearray, memoryview)
                or a string (base64, data url or plain text).
            metadata: Optional metadata associated with the file.

        Returns:
            UploadResponse: The id and public url of the uploaded file.

        Raises:
            UnsupportedBodyTypeError: If the body type is not supported. No request is made.
            ControlPlaneError: If the signed URL cannot be generated.
            UploadFailedError: If the object store rejects the upload.
        """
        info = inspect_body(body)
        signed_url = await self.generate_signed_url(info.content_type, info.size, metadata)

        await self._put(
            signed_url.url,
            info.as_content(),
            info.content_type,
            info.size,
            UploadFailedError,
            "Failed to upload file",
        )

        logger.debug("Upload complete.", media_id=signed_url.media_id, size=info.size)
        return UploadResponse(id=signed_url.media_id, url=signed_url.media_url)


    async def upload_stream(
        self,
        stream: AsyncIterable[bytes] | Iterable[bytes] | IO[bytes],
        content_type: str,
        content_length: int,
        metadata: FileMetadata | None = None,
    ) -> UploadResponse:
        """Upload a stream to the object store through a signed URL.

        The stream is forwarded chunk by chunk. The caller is responsible for
        content_length being exact; the object store rejects mismatches.

        Args:
            stream: An async or sync iterable of bytes, or a readable binary file object.
            content_type: The MIME type of the content.
            content_length: The size of the content in bytes.
            metadata: Optional metadata associated with the file.

        Returns:
            UploadResponse: The id and public url of the uploaded file.

        Raises:
            ControlPlaneError: If the signed URL cannot be generated.
            StreamUploadFailedError: If the object store rejects the upload.
        """
        signed_url = await self.generate_signed_url(content_type, content_length, metadata)

        await self._put(
            signed_url.url,
            aiter_bytes(stream),
            content_type,
            content_length,
            StreamUploadFailedError,
            "Failed to upload stream",
        )

        logger.debug("Stream upload complete.", media_id=signed_url.media_id, size=content_length)
        return UploadResponse(id=signed_url.media_id, url=signed_url.media_url)


    async def _delete_one(self, media_id: str) -> None:
        res = await self._fetch(f"storage/{quote(media_id, safe='')}", method="DELETE")
        resolve_json_response(res)


    async def delete(self, media_id: str | Sequence[str]) -> None:
        """Delete one or more media files.

        Collections are deleted in sequential batches of at most 100 ids. The first
        failing batch stops the deletion: earlier batches stay deleted and later
        batches are never sent.

        Args:
            media_id: The id of the media to delete, or a collection of ids.

        Raises:
            ControlPlaneError: If a single deletion fails (e.g. the media doesn't exist).
            BatchDeleteError: If a batch deletion fails. It tells which batch failed
                and the offset to resume from, and chains the underlying error.
        """
        if isinstance(media_id, str):
            await self._delete_one(media_id)
            return

        ids = list(media_id)
        if not ids:
            return
        if len(ids) == 1:
            await self._delete_one(ids[0])
            return

        batch_count = -(-len(ids) // DELETE_BATCH_SIZE)
        for batch_index in range(batch_count):
            offset = batch_index * DELETE_BATCH_SIZE
            batch = ids[offset:offset + DELETE_BATCH_SIZE]
            logger.debug(
                "Deleting batch.",
                event_name="delete_batch",
                batch_index=batch_index,
                batch_count=batch_count,
                batch_size=len(batch),
            )
            try:
                res = await self._fetch(
                    "storage/bulk",
                    method="DELETE",
                    json={"ids": batch},
                )
                resolve_json_response(res)
            except (ControlPlaneError, TransportError) as exc:
                raise BatchDeleteError(
                    f"Batch {batch_index + 1} of {batch_count} failed: {exc.message}",
                    status=exc.status,
                    code=exc.code,
                    batch_index=batch_index,
                    batch_count=batch_count,
                    offset=offset,
                    ids=batch,
                ) from exc
