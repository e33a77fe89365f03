"""
Sources — turn any supported input into (bytes, mime_type).

Supported inputs:

| Input                              | Bytes            | Type                         |
|------------------------------------|------------------|------------------------------|
| "http://..." / "https://..." str   | HTTP GET (httpx) | Content-Type header or None  |
| any other str / os.PathLike        | file read        | extension lookup             |
| bytes / bytearray / memoryview     | as given         | sniffed                      |
| binary file object / chunk iterator| drained          | sniffed                      |
| Blob                               | as given         | blob.type                    |

Inputs are first classified into one of the SourceInput variants, then
resolved. Anything else raises UnsupportedInputError.

## Environment Variables

- FILE_HANDLER_FETCH_TIMEOUT: HTTP timeout in seconds (default: 30)
"""

from __future__ import annotations

import logging
import mimetypes
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Optional, Tuple, Union

import httpx

from ..models.asset import OCTET_STREAM, Blob
from ..validation import UnsupportedInputError
from .sniff import sniff

logger = logging.getLogger(__name__)

URL_PREFIXES = ("http://", "https://")
STREAM_CHUNK_SIZE = 64 * 1024
DEFAULT_FETCH_TIMEOUT = 30.0
USER_AGENT = "file-handler/1.0"

BYTES_TYPES = (bytes, bytearray, memoryview)


# ── Input variants ───────────────────────────────────────────


@dataclass(frozen=True)
class PathInput:
    path: Path


@dataclass(frozen=True)
class UrlInput:
    url: str


@dataclass(frozen=True)
class BufferInput:
    data: bytes


@dataclass(frozen=True)
class StreamInput:
    stream: Union[BinaryIO, Iterable[bytes]]


@dataclass(frozen=True)
class BlobInput:
    blob: Blob


SourceInput = Union[PathInput, UrlInput, BufferInput, StreamInput, BlobInput]
SOURCE_TYPES = (PathInput, UrlInput, BufferInput, StreamInput, BlobInput)


def classify_input(value: Any) -> SourceInput:
    """
    Decide which source variant an arbitrary input is.

    Raises:
        UnsupportedInputError: If the value matches no variant.
    """
    if isinstance(value, SOURCE_TYPES):
        return value

    if isinstance(value, str):
        if value.startswith(URL_PREFIXES):
            return UrlInput(value)
        return PathInput(Path(value))

    if isinstance(value, os.PathLike):
        return PathInput(Path(value))

    if isinstance(value, BYTES_TYPES):
        return BufferInput(bytes(value))

    if isinstance(value, Blob):
        return BlobInput(value)

    if callable(getattr(value, "read", None)) or isinstance(value, Iterator):
        return StreamInput(value)

    raise UnsupportedInputError(value)


# ── Resolution ───────────────────────────────────────────────


def fetch_timeout() -> float:
    return float(os.environ.get("FILE_HANDLER_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT))


def fetch_url(url: str, client: Optional[httpx.Client] = None) -> Tuple[bytes, Optional[str]]:
    """
    GET a URL and return its body with the declared Content-Type.

    A missing or blank Content-Type comes back as None. Error statuses are
    logged but the body is still returned; transport errors propagate.
    """
    headers = {"User-Agent": USER_AGENT}
    if client is not None:
        response = client.get(url, headers=headers, follow_redirects=True)
    else:
        response = httpx.get(url, headers=headers, follow_redirects=True, timeout=fetch_timeout())

    if response.status_code >= 400:
        logger.warning(f"GET {url} returned {response.status_code}")

    content_type = (response.headers.get("content-type") or "").strip() or None
    logger.debug(
        f"Fetched {url}: {len(response.content):,} bytes ({content_type})",
        extra={"source": url, "mime_type": content_type, "size_bytes": len(response.content)},
    )
    return response.content, content_type


def read_path(path: Path) -> Tuple[bytes, str]:
    """Read a local file; the type comes from its extension."""
    data = path.read_bytes()
    mime_type = mimetypes.guess_type(path.name)[0] or OCTET_STREAM
    logger.debug(
        f"Read {path}: {len(data):,} bytes ({mime_type})",
        extra={"source": str(path), "mime_type": mime_type, "size_bytes": len(data)},
    )
    return data, mime_type


def drain_stream(stream: Union[BinaryIO, Iterable[bytes]]) -> bytes:
    """
    Read a stream to exhaustion, concatenating chunks in order.

    Raises:
        UnsupportedInputError: If the stream yields something other than bytes.
    """
    chunks = []
    read = getattr(stream, "read", None)

    if callable(read):
        while True:
            chunk = read(STREAM_CHUNK_SIZE)
            if not chunk:
                break
            if not isinstance(chunk, BYTES_TYPES):
                raise UnsupportedInputError(chunk)
            chunks.append(bytes(chunk))
    else:
        for chunk in stream:
            if not isinstance(chunk, BYTES_TYPES):
                raise UnsupportedInputError(chunk)
            chunks.append(bytes(chunk))

    return b"".join(chunks)


def resolve_source(
    source: SourceInput,
    client: Optional[httpx.Client] = None,
) -> Tuple[bytes, Optional[str]]:
    """
    Produce the bytes and MIME type for a classified input.

    Only URL sources can yield a None type.
    """
    if isinstance(source, UrlInput):
        return fetch_url(source.url, client=client)

    if isinstance(source, PathInput):
        return read_path(source.path)

    if isinstance(source, BufferInput):
        return source.data, sniff(source.data)

    if isinstance(source, StreamInput):
        data = drain_stream(source.stream)
        return data, sniff(data)

    if isinstance(source, BlobInput):
        return bytes(source.blob.data), source.blob.type or OCTET_STREAM

    raise UnsupportedInputError(source)
