import base64
import binascii
import inspect
import re
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import IO, Any
from urllib.parse import unquote_to_bytes

from .errors import InvalidBase64Error
from .types.blob import DEFAULT_CHUNK_SIZE

# data:<type>/<subtype>[;<param>...][;base64],<payload>
DATA_URL_PATTERN = re.compile(
    r"^data:([a-z0-9!#$&^_.+-]+/[a-z0-9!#$&^_.+-]+)((?:;[a-z0-9!#$&^_.+-]+(?:=[^;,\s]*)?)*),",
    re.IGNORECASE,
)

# Base64 prefixes of well-known file signatures, checked in this order. "AAAA" (mp4)
# is a loose match for any payload starting with zero bytes, so it must stay last.
BASE64_SIGNATURES: tuple[tuple[str, str], ...] = (
    ("iVBORw0KGgo", "image/png"),
    ("/9j/", "image/jpeg"),
    ("R0lGOD", "image/gif"),
    ("UklGR", "image/webp"),
    ("JVBERi0", "application/pdf"),
    ("UEsDB", "application/zip"),
    ("PD94bWw", "application/xml"),
    ("PHN2Zw", "image/svg+xml"),
    ("AAAA", "video/mp4"),
)

_WHITESPACE = re.compile(r"\s+")


def normalize_mime_type(mime_type: str | None) -> str:
    """Strip parameters (e.g. ";charset=utf-8") from a MIME type."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def parse_data_url(value: str) -> tuple[str, bool] | None:
    """Return the declared media type of a data url and whether its payload is base64."""
    match = DATA_URL_PATTERN.match(value)
    if match is None:
        return None
    params = [p.strip().lower() for p in match.group(2).split(";") if p.strip()]
    return match.group(1).strip(), "base64" in params


def detect_mime_type(value: str) -> str | None:
    """Detect the MIME type of a base64 string or data url.

    A data url's declared media type always wins. Otherwise the string prefix is
    matched against known base64 file signatures. Returns None when the string
    doesn't look like base64 content.
    """
    data_url = parse_data_url(value)
    if data_url is not None:
        return data_url[0]
    for prefix, mime_type in BASE64_SIGNATURES:
        if value.startswith(prefix):
            return mime_type
    return None


def extract_base64_data(value: str) -> str:
    """Strip the data url header, if any, and whitespace from a base64 string."""
    if DATA_URL_PATTERN.match(value):
        value = value.split(",", 1)[1]
    return _WHITESPACE.sub("", value)


def decoded_size(payload: str) -> int:
    """Exact byte length of a base64 payload, computed without decoding it."""
    payload = _WHITESPACE.sub("", payload)
    padding = len(payload) - len(payload.rstrip("="))
    return (len(payload) * 3) // 4 - padding


def decode_base64(payload: str) -> bytes:
    """Decode a standard base64 payload. Missing padding is tolerated.

    Raises:
        InvalidBase64Error: If the payload contains characters outside the base64 alphabet.
    """
    payload = _WHITESPACE.sub("", payload)
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidBase64Error(f"Invalid base64 payload: {exc}") from exc


def decode_data_url_text(value: str) -> bytes:
    """Decode the percent-encoded payload of a non-base64 data url."""
    return unquote_to_bytes(value.split(",", 1)[1])


async def aiter_bytes(
    source: AsyncIterable[bytes] | Iterable[bytes] | IO[bytes] | bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Adapt an async iterable, a sync iterable or a binary file object into an async byte stream."""
    if isinstance(source, bytes | bytearray | memoryview):
        yield bytes(source)
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(chunk_size)
            if inspect.isawaitable(chunk):
                chunk = await chunk
            if not chunk:
                return
            yield bytes(chunk)
    elif isinstance(source, AsyncIterable):
        async for chunk in source:
            yield bytes(chunk)
    elif isinstance(source, Iterable) and not isinstance(source, str):
        for chunk in source:
            yield bytes(chunk)
    else:
        raise TypeError(f"Cannot stream object of type {type(source).__name__}")


def redact_url(url: Any) -> str:
    """Drop the query string of a url, where signed urls carry their credentials."""
    return str(url).split("?", 1)[0]
