"""Filesystem and MIME helpers for asset uploads."""

from __future__ import annotations

import mimetypes
import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

__all__ = [
    "CHUNK_SIZE",
    "DEFAULT_CONTENT_TYPE",
    "content_type_for",
    "is_accessible",
    "iter_chunks",
]

CHUNK_SIZE = 64 * 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_ENCODING_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
}


def is_accessible(path: str | Path) -> bool:
    """True if path is an existing regular file we may read."""
    p = Path(path)
    return p.is_file() and os.access(p, os.R_OK)


def content_type_for(file_name: str) -> str:
    """Guess a content type from the file name alone.

    Compressed archives are typed by their compression (``a.tar.gz`` is
    ``application/gzip``), since that is what the uploaded bytes are.
    """
    guessed, encoding = mimetypes.guess_type(file_name, strict=False)
    if encoding in _ENCODING_TYPES:
        return _ENCODING_TYPES[encoding]
    return guessed or DEFAULT_CONTENT_TYPE


def iter_chunks(handle: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            return
        yield chunk
