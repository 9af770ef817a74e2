import base64
import io

import pytest
from nocloud.errors import InvalidBase64Error
from nocloud.utils import (
    aiter_bytes,
    decode_base64,
    decoded_size,
    detect_mime_type,
    extract_base64_data,
    normalize_mime_type,
    redact_url,
)

PNG_DATA_URL = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="
)


def test_normalize_mime_type() -> None:
    assert normalize_mime_type("text/plain;charset=utf-8") == "text/plain"
    assert normalize_mime_type(" Image/PNG ") == "image/png"
    assert normalize_mime_type("") == ""
    assert normalize_mime_type(None) == ""


@pytest.mark.parametrize(
    "value, expected",
    [
        ("iVBORw0KGgoAAAANSUhEUg", "image/png"),
        ("/9j/4AAQSkZJRgABAQ", "image/jpeg"),
        ("R0lGODlhAQABAIAAAP", "image/gif"),
        ("UklGRiQAAABXRUJQ", "image/webp"),
        ("JVBERi0xLjQK", "application/pdf"),
        ("UEsDBBQAAAAIAA", "application/zip"),
        ("PD94bWwgdmVyc2lvbj0i", "application/xml"),
        ("PHN2Zw==", "image/svg+xml"),
        ("AAAAIGZ0eXBpc29t", "video/mp4"),
    ],
)
def test_detect_mime_type_signatures(value: str, expected: str) -> None:
    assert detect_mime_type(value) == expected


def test_detect_mime_type_data_url_wins_over_signature() -> None:
    assert detect_mime_type("data:application/pdf;base64,JVBERi0xLjQK") == "application/pdf"
    # The payload looks like a PNG, the declared type still wins.
    assert detect_mime_type("data:application/octet-stream;base64,iVBORw0KGgo=") == "application/octet-stream"


def test_detect_mime_type_data_url_keeps_declared_type() -> None:
    assert detect_mime_type("data:application/x-ndjson;base64,eyJrZXkiOiAidmFsdWUifQ==") == "application/x-ndjson"
    assert detect_mime_type("data:text/plain;charset=utf-8;base64,SGk=") == "text/plain"
    assert detect_mime_type("data:text/plain,hello") == "text/plain"


def test_detect_mime_type_plain_text() -> None:
    assert detect_mime_type("Hello, NoCloud!") is None
    assert detect_mime_type("héllo") is None
    assert detect_mime_type("") is None
    assert detect_mime_type("data:,no media type") is None
    assert detect_mime_type("data: meeting notes, agenda follows") is None
    assert detect_mime_type("data:notes,more") is None


def test_extract_base64_data() -> None:
    assert extract_base64_data("data:image/png;base64,iVBORw0KGgo=") == "iVBORw0KGgo="
    assert extract_base64_data("iVBORw0KGgo=") == "iVBORw0KGgo="
    assert extract_base64_data("SGVs\nbG8s\r\nIFdv cmxk") == "SGVsbG8sIFdvcmxk"


@pytest.mark.parametrize("content", [b"abc", b"abcd", b"abcde", b"", b"\x00" * 7, bytes(range(256))])
def test_decoded_size_matches_decoded_length(content: bytes) -> None:
    payload = base64.b64encode(content).decode()
    assert decoded_size(payload) == len(content)
    assert len(decode_base64(payload)) == len(content)


def test_decoded_size_padding() -> None:
    # 0, 1 and 2 padding characters.
    assert decoded_size("YWJj") == 3
    assert decoded_size("YWJjZA==") == 4
    assert decoded_size("YWJjZGU=") == 5


def test_decoded_size_of_data_url_payload() -> None:
    payload = extract_base64_data(PNG_DATA_URL)
    assert decoded_size(payload) == len(decode_base64(payload)) == 70


def test_decode_base64_tolerates_missing_padding() -> None:
    assert decode_base64("SGVsbG8") == b"Hello"
    assert decoded_size("SGVsbG8") == 5


def test_decode_base64_invalid() -> None:
    with pytest.raises(InvalidBase64Error) as exc_info:
        decode_base64("not base64!")
    assert exc_info.value.status == 400


def test_redact_url() -> None:
    assert redact_url("https://store.test/x?X-Signature=secret") == "https://store.test/x"


@pytest.mark.asyncio
async def test_aiter_bytes_sources() -> None:
    async def agen():
        yield b"ab"
        yield b"cd"

    assert [c async for c in aiter_bytes(agen())] == [b"ab", b"cd"]
    assert [c async for c in aiter_bytes([b"ab", bytearray(b"cd")])] == [b"ab", b"cd"]
    assert [c async for c in aiter_bytes(io.BytesIO(b"abcdef"), chunk_size=4)] == [b"abcd", b"ef"]
    assert [c async for c in aiter_bytes(b"abc")] == [b"abc"]

    with pytest.raises(TypeError):
        [c async for c in aiter_bytes(42)]
