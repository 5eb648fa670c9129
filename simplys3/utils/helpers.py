"""Helper functions for common operations."""

import math
import posixpath
from typing import Optional
from .constants import CONTENT_TYPES


def expected_chunks(size_bytes: int, max_chunk_bytes: int) -> int:
    """Number of chunks a file of this size is split into (at least one)."""
    return max(1, math.ceil(size_bytes / max_chunk_bytes))


def expected_batches(size_bytes: int, max_chunk_bytes: int, max_concurrent: int) -> int:
    """Number of part-upload batches a multipart upload of this size needs."""
    return math.ceil(expected_chunks(size_bytes, max_chunk_bytes) / max_concurrent)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def build_object_key(prefix: Optional[str], relative_path: str) -> str:
    """
    Join a bucket path prefix and a file's relative path into an object key.
    Format: [prefix/]relative/path, no leading slash, no "." segments.
    """
    key = posixpath.normpath(posixpath.join("/", prefix or "", relative_path))
    return key.lstrip("/")


def content_type_for(key: str) -> Optional[str]:
    """Content type to force for a key, or None to let the store decide."""
    _, ext = posixpath.splitext(key.lower())
    return CONTENT_TYPES.get(ext)
