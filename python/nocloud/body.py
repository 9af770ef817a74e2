from typing import Any

import structlog

from .errors import InvalidBase64Error
from .types.body import BlobBody, BodyInfo, BufferBody, TextBody, as_file_body
from .utils import (
    decode_base64,
    decode_data_url_text,
    detect_mime_type,
    extract_base64_data,
    normalize_mime_type,
    parse_data_url,
)

logger = structlog.get_logger("nocloud.body")


def _inspect_text(text: str) -> BodyInfo:
    detected_type = detect_mime_type(text)
    if detected_type is not None:
        data_url = parse_data_url(text)
        if data_url is not None and not data_url[1]:
            decoded = decode_data_url_text(text)
            return BodyInfo(content_type=detected_type, size=len(decoded), payload=decoded)
        try:
            decoded = decode_base64(extract_base64_data(text))
            return BodyInfo(content_type=detected_type, size=len(decoded), payload=decoded)
        except InvalidBase64Error:
            if data_url is not None:
                raise
            # Signature matched by accident (e.g. "AAAA..." text), not base64 after all.
            logger.debug("String matched a base64 signature but is not base64.", detected_type=detected_type)

    encoded = text.encode("utf-8")
    return BodyInfo(content_type="text/plain", size=len(encoded), payload=encoded)


def inspect_body(body: Any) -> BodyInfo:
    """Determine the content type, exact byte size and transferable payload of an upload body.

    - Blobs keep their declared type (parameters stripped) and size. Their content is not read.
    - Byte buffers are sent as application/octet-stream.
    - Strings are decoded when they are data urls or base64 with a known file signature,
      and sent as UTF-8 text/plain otherwise.

    Raises:
        UnsupportedBodyTypeError: If the body is none of the above.
        InvalidBase64Error: If a base64 data url carries an undecodable payload.
    """
    file_body = as_file_body(body)

    match file_body:
        case BlobBody(blob=blob):
            info = BodyInfo(
                content_type=normalize_mime_type(blob.type) or "application/octet-stream",
                size=blob.size,
                payload=blob,
            )
        case BufferBody(data=data):
            info = BodyInfo(content_type="application/octet-stream", size=len(data), payload=data)
        case TextBody(text=text):
            info = _inspect_text(text)

    logger.debug(
        "Inspected upload body.",
        kind=file_body.kind,
        content_type=info.content_type,
        size=info.size,
    )
    return info
