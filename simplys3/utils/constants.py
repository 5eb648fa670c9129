"""Application constants and enums."""

from enum import Enum


class StorageProvider(str, Enum):
    """Storage provider enum."""

    S3 = "s3"
    WASABI = "wasabi"


class UploadStrategy(str, Enum):
    """How an object was sent to the bucket."""

    SINGLE = "single"
    MULTIPART = "multipart"


# Content types the store would otherwise guess wrong
CONTENT_TYPES = {
    ".html": "text/html",
}
