"""Pytest configuration and fixtures."""

import asyncio
from typing import Callable, Iterable, List, Optional
from unittest.mock import MagicMock

import pytest

from simplys3.config import Settings
from simplys3.repositories.storage_repo import StorageRepository
from simplys3.schemas.credential import Credentials
from simplys3.schemas.upload import PartResult


ENV_VARS = [
    "DEBUG",
    "APP_VERSION",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "WASABI_ENDPOINT",
    "MAX_POOL_CONNECTIONS",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_DEFAULT_REGION",
    "S3_ENDPOINT_URL",
    "STORAGE_PROVIDER",
    "MAX_CHUNK_BYTES",
    "MAX_CONCURRENT",
    "READ_BLOCK_BYTES",
]


class RecordingStream:
    """Async byte stream that records how it is consumed."""

    def __init__(self, blocks: Iterable[bytes], fail_after: Optional[int] = None):
        self.blocks: List[bytes] = list(blocks)
        self.fail_after = fail_after
        self.reads = 0
        self.closed = False

    def __aiter__(self) -> "RecordingStream":
        return self

    async def __anext__(self) -> bytes:
        if self.closed:
            raise StopAsyncIteration
        if self.fail_after is not None and self.reads >= self.fail_after:
            raise OSError("disk read failed")
        if self.reads >= len(self.blocks):
            raise StopAsyncIteration
        block = self.blocks[self.reads]
        self.reads += 1
        return block

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the settings under test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for settings with small chunk sizes."""
    def _make(**overrides) -> Settings:
        values = {
            "max_chunk_bytes": 10,
            "max_concurrent": 3,
            "read_block_bytes": 4,
            "log_format": "console",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def make_stream() -> Callable[..., RecordingStream]:
    """Factory for recording byte streams."""
    def _make(*blocks: bytes, fail_after: Optional[int] = None) -> RecordingStream:
        return RecordingStream(blocks, fail_after=fail_after)

    return _make


@pytest.fixture
def credentials() -> Credentials:
    """Static test credentials."""
    return Credentials(
        access_key_id="AKIATEST",
        secret_access_key="secret",
        region="us-east-1",
    )


@pytest.fixture
def storage_repo() -> MagicMock:
    """
    Mock storage repository.
    Parts succeed with an ETag derived from the part number.
    """
    repo = MagicMock(spec=StorageRepository)
    repo.put_object.return_value = {"ETag": '"single"'}
    repo.create_multipart_upload.return_value = "upload-1"
    repo.complete_multipart_upload.return_value = {"ETag": '"multi"'}
    repo.abort_multipart_upload.return_value = None

    async def upload_part(bucket, key, upload_id, part_number, body):
        await asyncio.sleep(0)
        return PartResult(part_number=part_number, etag=f'"etag-{part_number}"')

    repo.upload_part.side_effect = upload_part
    return repo


@pytest.fixture
def s3_client() -> MagicMock:
    """Mock boto3 S3 client."""
    client = MagicMock()
    client.head_bucket.return_value = {}
    client.put_object.return_value = {"ETag": '"single"'}
    client.create_multipart_upload.return_value = {"UploadId": "upload-1"}
    client.upload_part.side_effect = lambda **kw: {"ETag": f'"etag-{kw["PartNumber"]}"'}
    client.complete_multipart_upload.return_value = {"ETag": '"multi"'}
    client.abort_multipart_upload.return_value = {}
    return client
