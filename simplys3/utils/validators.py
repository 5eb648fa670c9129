"""Validators for command-line and settings input."""

from typing import Optional, Tuple
from ..core.exceptions import InvalidArgumentError

# S3 rejects parts above 5 GiB
MAX_PART_BYTES = 5 * 1024 * 1024 * 1024


def validate_chunk_size(max_chunk_bytes: int) -> int:
    """Validate the chunk size used to split files."""
    if max_chunk_bytes < 1:
        raise InvalidArgumentError("Chunk size must be at least 1 byte")
    if max_chunk_bytes > MAX_PART_BYTES:
        raise InvalidArgumentError("Chunk size must not exceed 5 GiB")
    return max_chunk_bytes


def validate_concurrency(max_concurrent: int) -> int:
    """Validate the number of part uploads run at once."""
    if max_concurrent < 1:
        raise InvalidArgumentError("Concurrency must be at least 1")
    return max_concurrent


def split_bucket_path(bucket_path: str) -> Tuple[str, Optional[str]]:
    """
    Split "bucket/some/path" into ("bucket", "some/path").
    Paths must be unix style. A bare bucket name gives no path.
    """
    bucket_path = (bucket_path or "").strip()
    if not bucket_path or bucket_path.startswith("/"):
        raise InvalidArgumentError("Bucket name must be provided")

    bucket, _, path = bucket_path.partition("/")
    path = path.strip("/")
    return bucket, (path or None)
