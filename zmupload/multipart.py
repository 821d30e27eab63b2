"""Streaming ``multipart/form-data`` encoder.

Parts are collected in insertion order and serialized lazily: nothing is read
from a part's content until the stream built by :meth:`MultipartEncoder.build`
reaches it, and content is copied in bounded chunks so large files never have
to fit in memory.

Wire framing, per part::

    --<boundary>\\r\\n
    <Name>: <Value>\\r\\n        (one line per header)
    \\r\\n
    <content>\\r\\n

followed by the closing delimiter ``--<boundary>--\\r\\n``.

Example::

    encoder = MultipartEncoder()
    encoder.add_field("requestId", "req-1", {"Content-Type": "text/plain"})
    encoder.add_file("report.pdf", Path("/tmp/report.pdf"))
    with encoder.build() as body:
        for chunk in body:
            sock.sendall(chunk)
"""

from __future__ import annotations

import io
import logging
import ntpath
import os
import secrets
from contextlib import closing
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import IO, Any, Iterator, Mapping, Optional, Union

from zmupload.attachment.mime_types import lookup_mime_type
from zmupload.errors import InvalidResourceError, UploadError

logger = logging.getLogger(__name__)

# Content is copied in chunks of this many bytes
CHUNK_SIZE = 1024 * 1024

CRLF = b"\r\n"
DASHES = b"--"


def basename(path: str) -> str:
    """Return the final segment of a path, ignoring trailing separators.

    Both ``/`` and ``\\`` are treated as separators, so Windows paths give the
    same result on every platform.
    """
    stripped = path.rstrip("/\\")
    return os.path.basename(ntpath.basename(stripped))


@dataclass(frozen=True)
class BytesSource:
    """In-memory part content."""

    data: bytes

    @property
    def filename(self) -> Optional[str]:
        return None

    @property
    def size(self) -> Optional[int]:
        return len(self.data)

    def chunks(self, chunk_size: int) -> Iterator[bytes]:
        view = memoryview(self.data)
        for start in range(0, len(view), chunk_size):
            yield bytes(view[start : start + chunk_size])


@dataclass(frozen=True)
class StreamSource:
    """An already open, readable binary stream owned by the caller.

    Seekable streams are rewound before their content is copied. The stream
    is left open once copied.
    """

    stream: IO[bytes]

    @property
    def filename(self) -> Optional[str]:
        name = getattr(self.stream, "name", None)
        # Pseudo files such as "<stdin>" carry no usable name
        if isinstance(name, str) and name and not name.startswith("<"):
            return name
        return None

    @property
    def size(self) -> Optional[int]:
        try:
            if not self.stream.seekable():
                return None
            position = self.stream.tell()
            total = self.stream.seek(0, io.SEEK_END)
            self.stream.seek(position)
        except (AttributeError, OSError, ValueError):
            return None
        return total

    def chunks(self, chunk_size: int) -> Iterator[bytes]:
        seekable = getattr(self.stream, "seekable", None)
        if seekable is not None and seekable():
            self.stream.seek(0)
        for chunk in iter(partial(self.stream.read, chunk_size), b""):
            yield chunk


@dataclass(frozen=True)
class FileSource:
    """A file on disk, opened only while its part is being streamed."""

    path: Path

    @property
    def filename(self) -> Optional[str]:
        return str(self.path)

    @property
    def size(self) -> Optional[int]:
        try:
            return self.path.stat().st_size
        except OSError:
            return None

    def chunks(self, chunk_size: int) -> Iterator[bytes]:
        logger.debug("Opening '%s' for streaming", self.path)
        with self.path.open("rb") as handle:
            for chunk in iter(partial(handle.read, chunk_size), b""):
                yield chunk


ContentSource = Union[BytesSource, StreamSource, FileSource]


def as_content_source(resource: Any) -> ContentSource:
    """Convert a part resource into a content source.

    Accepted resources:
        - ``str``: text content, encoded as UTF-8
        - ``bytes``, ``bytearray``, ``memoryview``: binary content
        - ``os.PathLike``: a file read lazily from disk
        - a readable binary stream (anything with a ``read`` method that is not
          a text stream)
        - an existing content source, returned unchanged

    Raises:
        InvalidResourceError: For any other resource.
    """
    if isinstance(resource, (BytesSource, StreamSource, FileSource)):
        return resource
    if isinstance(resource, str):
        return BytesSource(resource.encode("utf-8"))
    if isinstance(resource, (bytes, bytearray, memoryview)):
        return BytesSource(bytes(resource))
    if isinstance(resource, os.PathLike):
        return FileSource(Path(resource))
    if isinstance(resource, io.TextIOBase):
        raise InvalidResourceError.for_resource(resource)
    if callable(getattr(resource, "read", None)):
        return StreamSource(resource)
    raise InvalidResourceError.for_resource(resource)


def _has_header(headers: Mapping[str, str], key: str) -> bool:
    wanted = key.lower()
    return any(name.lower() == wanted for name in headers)


def _prepare_headers(
    name: str,
    filename: Optional[str],
    size: Optional[int],
    headers: Mapping[str, str],
) -> dict[str, str]:
    """Complete caller headers with disposition, length and type defaults.

    Defaults are only added when no header of the same name (compared
    case-insensitively) was supplied, and are appended after the caller's
    headers.
    """
    prepared = dict(headers)

    if not _has_header(prepared, "content-disposition"):
        disposition = f'form-data; name="{name}"'
        if filename:
            disposition += f'; filename="{basename(filename)}"'
        prepared["Content-Disposition"] = disposition

    if size is not None and not _has_header(prepared, "content-length"):
        prepared["Content-Length"] = str(size)

    if filename and not _has_header(prepared, "content-type"):
        mime_type = lookup_mime_type(filename)
        if mime_type:
            prepared["Content-Type"] = mime_type

    return prepared


@dataclass(frozen=True)
class MultipartPart:
    """One named section of a multipart body.

    ``size`` is the content length measured when the part was added, or None
    when it cannot be known up front. Content is streamed up to that length.
    """

    name: str
    content: ContentSource
    headers: dict[str, str] = field(default_factory=dict)
    size: Optional[int] = None

    def head(self, boundary: str) -> bytes:
        """Return the delimiter line, header lines and blank separator line."""
        lines = [DASHES + boundary.encode("ascii") + CRLF]
        for key, value in self.headers.items():
            lines.append(f"{key}: {value}".encode("utf-8") + CRLF)
        lines.append(CRLF)
        return b"".join(lines)


class MultipartStream:
    """Single pass byte stream over a list of multipart parts.

    The stream can be iterated chunk by chunk or read like a file. File
    content is opened when its part is reached and closed when the part is
    fully copied, when the stream is closed, or when copying fails.

    ``len`` is the total body length when every part size is known, else
    None. ``requests`` reads this attribute to choose between a
    ``Content-Length`` header and chunked transfer encoding.
    """

    def __init__(self, boundary: str, parts: tuple[MultipartPart, ...], chunk_size: int):
        self.boundary = boundary
        self.parts = parts
        self.chunk_size = chunk_size
        self.closed = False
        self._chunks = self._generate()
        self._buffer = b""
        self._offset = 0

    @property
    def closing_delimiter(self) -> bytes:
        return DASHES + self.boundary.encode("ascii") + DASHES + CRLF

    @property
    def len(self) -> Optional[int]:
        total = len(self.closing_delimiter)
        for part in self.parts:
            if part.size is None:
                return None
            total += len(part.head(self.boundary)) + part.size + len(CRLF)
        return total

    def _content(self, part: MultipartPart) -> Iterator[bytes]:
        remaining = part.size
        with closing(part.content.chunks(self.chunk_size)) as chunks:
            for chunk in chunks:
                if remaining is not None:
                    chunk = chunk[:remaining]
                    remaining -= len(chunk)
                if chunk:
                    yield chunk
                if remaining == 0:
                    break
        # Content that shrank since it was measured would break the framing
        if remaining:
            raise UploadError(
                f"Part '{part.name}' ended {remaining} bytes short of its declared length"
            )

    def _generate(self) -> Iterator[bytes]:
        for part in self.parts:
            yield part.head(self.boundary)
            yield from self._content(part)
            yield CRLF
        yield self.closing_delimiter

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed multipart stream")

    def __iter__(self) -> Iterator[bytes]:
        self._check_open()
        if self._offset < len(self._buffer):
            pending = self._buffer[self._offset :]
            self._buffer, self._offset = b"", 0
            yield pending
        yield from self._chunks

    def read(self, size: Optional[int] = -1) -> bytes:
        """Read up to ``size`` bytes, or everything that is left."""
        self._check_open()
        if size is None or size < 0:
            pending = self._buffer[self._offset :]
            self._buffer, self._offset = b"", 0
            return pending + b"".join(self._chunks)

        pieces = []
        wanted = size
        while wanted > 0:
            if self._offset >= len(self._buffer):
                chunk = next(self._chunks, None)
                if chunk is None:
                    break
                self._buffer, self._offset = chunk, 0
            piece = self._buffer[self._offset : self._offset + wanted]
            self._offset += len(piece)
            wanted -= len(piece)
            pieces.append(piece)
        return b"".join(pieces)

    def readable(self) -> bool:
        return not self.closed

    def close(self) -> None:
        """Stop streaming and release any file still open."""
        if not self.closed:
            self._chunks.close()
            self._buffer, self._offset = b"", 0
            self.closed = True

    def __enter__(self) -> MultipartStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class MultipartEncoder:
    """Collects named parts and builds a ``multipart/form-data`` body.

    A fresh random boundary (20 random bytes, hex encoded) is generated per
    encoder; create one encoder per request. Part bodies are not scanned for
    the boundary.

    Args:
        chunk_size: Number of bytes copied at a time when streaming content.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self._boundary = secrets.token_hex(20)
        self._parts: list[MultipartPart] = []

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def content_type(self) -> str:
        """Value for the request's Content-Type header."""
        return f'multipart/form-data; boundary="{self._boundary}"'

    @property
    def parts(self) -> tuple[MultipartPart, ...]:
        return tuple(self._parts)

    def add_field(
        self, name: str, value: Union[str, bytes], headers: Optional[Mapping[str, str]] = None
    ) -> MultipartEncoder:
        """Append a form field part (no filename).

        Raises:
            InvalidResourceError: If ``value`` is not ``str`` or ``bytes``.
        """
        if not isinstance(value, (str, bytes)):
            raise InvalidResourceError.for_resource(value)
        return self._add_part(name, as_content_source(value), None, headers)

    def add_file(
        self,
        name: str,
        resource: Any,
        headers: Optional[Mapping[str, str]] = None,
        filename: Optional[str] = None,
    ) -> MultipartEncoder:
        """Append a file part.

        Args:
            name: Form part name.
            resource: Path, ``str``/``bytes`` content or readable binary stream.
            headers: Part headers; defaults are added for the missing ones.
            filename: Filename to announce. Defaults to the basename of the
                resource's path when it has one.

        Raises:
            InvalidResourceError: If the resource type is not supported.
        """
        source = as_content_source(resource)
        if filename is None:
            filename = source.filename
        return self._add_part(name, source, filename, headers)

    def _add_part(
        self,
        name: str,
        source: ContentSource,
        filename: Optional[str],
        headers: Optional[Mapping[str, str]],
    ) -> MultipartEncoder:
        size = source.size
        prepared = _prepare_headers(name, filename, size, headers or {})
        self._parts.append(MultipartPart(name=name, content=source, headers=prepared, size=size))
        return self

    def build(self) -> MultipartStream:
        """Return a lazy stream over the parts added so far."""
        return MultipartStream(self._boundary, tuple(self._parts), self.chunk_size)

    def to_bytes(self) -> bytes:
        """Serialize the whole body into memory. Meant for small payloads."""
        with self.build() as stream:
            return stream.read()
