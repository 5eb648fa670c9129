"""Upload service: streams and directory trees to a bucket."""

import asyncio
from pathlib import Path
from typing import AsyncIterable, List, Optional, Union
from botocore.exceptions import BotoCoreError, ClientError
from ..config import Settings, settings as default_settings
from ..core.exceptions import BucketAccessError
from ..repositories.storage_repo import StorageRepository
from ..schemas.upload import UploadResult
from ..utils.file_util import get_dir_recursive, read_file_blocks, remove_basepath
from ..utils.helpers import build_object_key, expected_batches, expected_chunks, format_file_size
from ..utils.logger import get_logger
from ..utils.validators import validate_chunk_size
from .chunk_splitter import ChunkSplitter
from .multipart_uploader import MultipartUploader

logger = get_logger(__name__)


class UploadService:
    """Service for uploading streams and local directories."""

    def __init__(self, storage_repo: StorageRepository, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.storage_repo = storage_repo
        self.max_chunk_bytes = validate_chunk_size(self.settings.max_chunk_bytes)
        self.uploader = MultipartUploader(storage_repo, self.settings.max_concurrent)

    async def verify_bucket(self, bucket: str) -> None:
        """Raise BucketAccessError if the bucket is missing or forbidden."""
        try:
            await self.storage_repo.head_bucket(bucket)
        except (ClientError, BotoCoreError) as e:
            raise BucketAccessError(bucket) from e

    async def upload_stream(
        self,
        stream: AsyncIterable[bytes],
        bucket: str,
        key: str,
        size_hint: Optional[int] = None,
    ) -> UploadResult:
        """
        Upload one stream to bucket/key.
        Safe to call concurrently for different objects.
        """
        splitter = ChunkSplitter(stream, self.max_chunk_bytes)
        try:
            return await self.uploader.upload(splitter, bucket, key, size_hint=size_hint)
        finally:
            await splitter.aclose()

    async def upload_file(
        self, file_path: Union[str, Path], bucket: str, key: str
    ) -> UploadResult:
        """Upload one local file."""
        size = Path(file_path).stat().st_size
        stream = read_file_blocks(file_path, self.settings.read_block_bytes)
        return await self.upload_stream(stream, bucket, key, size_hint=size)

    async def upload_directory(
        self,
        source_dir: Union[str, Path],
        bucket: str,
        prefix: Optional[str] = None,
    ) -> List[UploadResult]:
        """
        Upload every file under source_dir to bucket, keyed by its path
        relative to source_dir under prefix.

        All files upload concurrently. Every upload is allowed to settle
        (and abort its own session on failure) before the first error is
        raised.
        """
        logger.info("Verifying bucket state", bucket=bucket)
        await self.verify_bucket(bucket)

        files = get_dir_recursive(source_dir)
        logger.info("Gathered files", source=str(source_dir), count=len(files))

        uploads = []
        for file_path in files:
            key = build_object_key(prefix, remove_basepath(source_dir, file_path))
            size = file_path.stat().st_size
            logger.info(
                "Found file",
                path=str(file_path),
                key=key,
                size=format_file_size(size),
                chunks=expected_chunks(size, self.max_chunk_bytes),
                batches=expected_batches(size, self.max_chunk_bytes, self.settings.max_concurrent),
            )
            uploads.append(self.upload_file(file_path, bucket, key))

        results = await asyncio.gather(*uploads, return_exceptions=True)

        failures = [r for r in results if isinstance(r, BaseException)]
        for file_path, result in zip(files, results):
            if isinstance(result, BaseException):
                logger.error("Upload failed", path=str(file_path), error=repr(result))
        if failures:
            raise failures[0]

        logger.info("Finished uploading files", count=len(results))
        return list(results)
