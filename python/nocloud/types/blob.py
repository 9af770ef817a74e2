import io
import mimetypes
from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any

DEFAULT_CHUNK_SIZE = 64 * 1024


class Blob:
    """A binary blob with a declared content type and size.

    Wraps in-memory bytes, a local file path or a readable binary file object.
    File content is never materialized: sizes are measured with stat or seek/tell,
    and content is read in chunks when the blob is transferred. Paths are opened
    only while being read, so a path-backed blob holds no file descriptor.

    Attributes:
        type: The declared MIME type. May carry parameters (e.g. "text/plain;charset=utf-8").
        size: The size in bytes. Always the exact number of bytes the blob yields.
        name: Optional file name, informational only.
    """

    __slots__ = ("_data", "_offset", "type", "size", "name")

    def __init__(
        self,
        data: bytes | bytearray | memoryview | str | Path | IO[bytes],
        type: str = "",  # noqa: A002
        size: int | None = None,
        name: str | None = None,
    ) -> None:
        self.type = type
        self.name = name
        self._offset = 0

        if isinstance(data, str):
            data = data.encode("utf-8")

        if isinstance(data, bytes | bytearray | memoryview):
            self._data: bytes | Path | IO[bytes] = bytes(data)
            measured = len(self._data)
            exact = True
        elif isinstance(data, Path):
            if not data.is_file():
                raise ValueError(f"Invalid file path: {data}")
            self._data = data
            measured = data.stat().st_size
            exact = True
        elif hasattr(data, "read"):
            self._data = data
            measured = self._measure(data)
            exact = False
        else:
            raise ValueError("Blob data must be bytes, a string, a path or a readable binary file object.")

        if size is None:
            if measured is None:
                raise ValueError("Blob size must be given for file objects that are not seekable.")
            size = measured
        if size < 0:
            raise ValueError("Blob size must be non-negative.")
        if measured is not None:
            # A file object may be sent partially (size < remaining bytes), never past its end.
            if (exact and size != measured) or size > measured:
                raise ValueError(f"Blob size {size} does not match the {measured} bytes available.")
        self.size = size


    def _measure(self, fileobj: IO[bytes]) -> int | None:
        """Measure the remaining bytes of a file object without reading it."""
        if hasattr(fileobj, "seekable") and not fileobj.seekable():
            return None
        try:
            self._offset = fileobj.tell()
            end = fileobj.seek(0, io.SEEK_END)
            fileobj.seek(self._offset)
        except (OSError, AttributeError):
            return None
        return end - self._offset


    def __repr__(self) -> str:
        return f"Blob(type={self.type!r}, size={self.size}, name={self.name!r})"


    def __len__(self) -> int:
        return self.size


    def __enter__(self) -> "Blob":
        return self


    def __exit__(self, *exc_info: Any) -> None:
        self.close()


    def close(self) -> None:
        """Close the wrapped file object, if any. Bytes and path-backed blobs hold nothing open."""
        if not isinstance(self._data, bytes | Path):
            self._data.close()


    @classmethod
    def from_path(cls, path: str | Path, type: str | None = None) -> "Blob":  # noqa: A002
        """Reference a local file as a blob. The content type is guessed from the extension if not given."""
        path = Path(path).expanduser().resolve()
        if type is None:
            type, _ = mimetypes.guess_type(path.name)  # noqa: A001
        return cls(path, type=type or "application/octet-stream", name=path.name)


    @property
    def is_file(self) -> bool:
        return not isinstance(self._data, bytes)


    @property
    def source(self) -> bytes | Path | IO[bytes]:
        """The wrapped bytes, path or file object."""
        return self._data


    @contextmanager
    def _open(self) -> Iterator[IO[bytes]]:
        """Yield a file object positioned at the start of the blob's content."""
        if isinstance(self._data, Path):
            with self._data.open("rb") as f:
                yield f
            return
        fileobj: Any = self._data
        if hasattr(fileobj, "seekable") and fileobj.seekable():
            fileobj.seek(self._offset)
        yield fileobj


    def read(self) -> bytes:
        """Read the whole blob into memory."""
        if isinstance(self._data, bytes):
            return self._data
        with self._open() as f:
            return f.read(self.size)


    async def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield the blob content in chunks of at most chunk_size bytes."""
        if isinstance(self._data, bytes):
            for start in range(0, len(self._data), chunk_size):
                yield self._data[start:start + chunk_size]
            return
        remaining = self.size
        with self._open() as f:
            while remaining > 0:
                chunk = f.read(min(chunk_size, remaining))
                if not chunk:
                    return
                remaining -= len(chunk)
                yield chunk
