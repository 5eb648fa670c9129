"""Single-shot or multipart upload of one object from a ChunkSplitter."""

import asyncio
from typing import List, Optional
from ..core.exceptions import PartSequenceError
from ..repositories.storage_repo import StorageRepository
from ..schemas.upload import PartResult, UploadResult, UploadSession
from ..utils.constants import UploadStrategy
from ..utils.helpers import expected_batches, expected_chunks
from ..utils.logger import get_logger
from ..utils.validators import validate_concurrency
from .chunk_splitter import ChunkSplitter

logger = get_logger(__name__)


class MultipartUploader:
    """
    Upload one object, in parts when it does not fit in a single chunk.

    Parts are uploaded in batches of ``max_concurrent``: a batch is
    dispatched, then awaited as a whole before the next chunk is pulled,
    so at most ``max_concurrent`` chunks are held in memory per object.
    Part numbers follow the order chunks leave the splitter.

    Any failure aborts the multipart session and re-raises the original
    exception. There are no retries here; they belong to the boto3 client.
    """

    def __init__(self, storage_repo: StorageRepository, max_concurrent: int):
        self.storage_repo = storage_repo
        self.max_concurrent = validate_concurrency(max_concurrent)

    async def upload(
        self,
        splitter: ChunkSplitter,
        bucket: str,
        key: str,
        size_hint: Optional[int] = None,
    ) -> UploadResult:
        """
        Upload everything the splitter yields to bucket/key.
        Args:
            splitter: Source of chunks for this object
            bucket: Destination bucket
            key: Destination object key
            size_hint: Expected size in bytes, used for progress logs only
        Returns:
            UploadResult describing what was sent
        """
        max_bytes = splitter.max_chunk_bytes
        first = await splitter.next_chunk()

        if first is None or len(first) < max_bytes:
            return await self._put_single(bucket, key, first or b"")

        # A full first chunk may still be the whole object
        second = await splitter.next_chunk()
        if second is None:
            return await self._put_single(bucket, key, first)

        return await self._upload_multipart(splitter, bucket, key, [first, second], size_hint)

    async def _put_single(self, bucket: str, key: str, body: bytes) -> UploadResult:
        await self.storage_repo.put_object(bucket, key, body)
        return UploadResult(
            bucket=bucket,
            key=key,
            strategy=UploadStrategy.SINGLE,
            part_count=1,
            bytes_uploaded=len(body),
        )

    async def _upload_multipart(
        self,
        splitter: ChunkSplitter,
        bucket: str,
        key: str,
        pending: List[bytes],
        size_hint: Optional[int],
    ) -> UploadResult:
        max_bytes = splitter.max_chunk_bytes
        predicted_batches = None
        if size_hint is not None:
            predicted_batches = expected_batches(size_hint, max_bytes, self.max_concurrent)
            logger.info(
                "Uploading file in parts",
                key=key,
                chunks=expected_chunks(size_hint, max_bytes),
                batches=predicted_batches,
            )
        else:
            logger.info("Uploading file in parts", key=key)

        # Nothing to clean up if this fails
        upload_id = await self.storage_repo.create_multipart_upload(bucket, key)
        session = UploadSession(bucket=bucket, key=key, upload_id=upload_id)

        in_flight: List["asyncio.Task[PartResult]"] = []
        part_number = 0
        batch_number = 0
        bytes_uploaded = 0

        async def pull() -> Optional[bytes]:
            if pending:
                return pending.pop(0)
            return await splitter.next_chunk()

        try:
            chunk = await pull()
            while chunk is not None:
                part_number += 1
                bytes_uploaded += len(chunk)
                in_flight.append(
                    asyncio.ensure_future(self._upload_part(session, part_number, chunk))
                )

                if len(in_flight) >= self.max_concurrent:
                    batch_number += 1
                    self._log_batch(key, batch_number, predicted_batches, final=False)
                    session.add_parts(await self._drain(in_flight))
                    in_flight = []

                chunk = await pull()

            if in_flight:
                batch_number += 1
                self._log_batch(key, batch_number, predicted_batches, final=True)
                session.add_parts(await self._drain(in_flight))
                in_flight = []

            parts = self._check_sequence(session)
            await self.storage_repo.complete_multipart_upload(bucket, key, upload_id, parts)
        except BaseException:
            if in_flight:
                await asyncio.gather(*in_flight, return_exceptions=True)
            await self._abort(session)
            raise

        logger.info("Finished uploading file", key=key, parts=len(parts), batches=batch_number)
        return UploadResult(
            bucket=bucket,
            key=key,
            strategy=UploadStrategy.MULTIPART,
            part_count=len(parts),
            bytes_uploaded=bytes_uploaded,
            upload_id=upload_id,
        )

    async def _upload_part(
        self, session: UploadSession, part_number: int, body: bytes
    ) -> PartResult:
        return await self.storage_repo.upload_part(
            session.bucket, session.key, session.upload_id, part_number, body
        )

    async def _drain(self, batch: List["asyncio.Task[PartResult]"]) -> List[PartResult]:
        """
        Wait for every task of the batch, then raise the first failure in
        dispatch order, if any.
        """
        results = await asyncio.gather(*batch, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    def _check_sequence(self, session: UploadSession) -> List[PartResult]:
        parts = session.ordered_parts()
        numbers = [part.part_number for part in parts]
        if numbers != list(range(1, len(numbers) + 1)):
            raise PartSequenceError(session.key, numbers)
        return parts

    async def _abort(self, session: UploadSession) -> None:
        """Abort the session. Failures are logged, never raised."""
        logger.warning("Aborting multipart upload", key=session.key, upload_id=session.upload_id)
        try:
            await self.storage_repo.abort_multipart_upload(
                session.bucket, session.key, session.upload_id
            )
        except Exception as e:
            logger.error(
                "Failed to abort multipart upload",
                key=session.key,
                upload_id=session.upload_id,
                error=str(e),
            )

    def _log_batch(
        self, key: str, batch_number: int, predicted: Optional[int], final: bool
    ) -> None:
        total = predicted if predicted is not None else "?"
        logger.info(
            "Uploading batch",
            key=key,
            batch=f"{batch_number}/{total}",
            final=final,
        )
