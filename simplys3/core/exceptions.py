"""Errors raised by simplys3.

Failures from the store (botocore) and from reading source files (OSError)
are not wrapped: they reach the caller as the original exception.
"""

from typing import List


class Simplys3Error(Exception):
    """Base class for simplys3 errors."""


class InvalidArgumentError(Simplys3Error, ValueError):
    """A command-line argument or size setting is not usable."""


class MissingCredentialsError(Simplys3Error):
    """A credential is missing and could not be prompted for."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Missing value for "{name}"')


class BucketAccessError(Simplys3Error):
    """The destination bucket does not exist or cannot be accessed."""

    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__(f"Requested S3 Bucket cannot be found or accessed: {bucket}")


class PartSequenceError(Simplys3Error):
    """Collected parts do not cover 1..N exactly once."""

    def __init__(self, key: str, part_numbers: List[int]):
        self.key = key
        self.part_numbers = part_numbers
        super().__init__(
            f"Parts for {key} are not contiguous from 1: {part_numbers[:10]}"
            + ("..." if len(part_numbers) > 10 else "")
        )
