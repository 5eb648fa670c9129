"""Storage repository for S3 bucket operations."""

import asyncio
from functools import partial
from typing import Any, Callable, Dict, List, Optional
from botocore.client import BaseClient
from ..config import Settings, get_storage_client
from ..schemas.credential import Credentials
from ..schemas.upload import PartResult
from ..utils.helpers import content_type_for
from ..utils.logger import get_logger

logger = get_logger(__name__)

DELETE_BATCH_SIZE = 1000


class StorageRepository:
    """
    Repository for storage operations against one S3 endpoint.

    boto3 calls block, so every operation runs in the event loop's default
    executor. The client is thread-safe and shared by all uploads.
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        settings: Optional[Settings] = None,
        client: Optional[BaseClient] = None,
    ):
        self.credentials = credentials
        self.settings = settings
        self.client: Optional[BaseClient] = client

    async def _get_client(self) -> BaseClient:
        """Get or create storage client."""
        if self.client is None:
            if self.credentials is None:
                raise ValueError("StorageRepository needs credentials or a client")
            self.client = get_storage_client(self.credentials, self.settings)
        return self.client

    async def _call(self, method: Callable[..., Any], **params: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(method, **params))

    async def head_bucket(self, bucket: str) -> bool:
        """
        Check the bucket exists and is accessible.
        Raises:
            ClientError: 404 when missing, 403 when forbidden
        """
        client = await self._get_client()
        await self._call(client.head_bucket, Bucket=bucket)
        return True

    async def put_object(self, bucket: str, key: str, body: bytes) -> Dict[str, Any]:
        """
        Upload an object in a single request.
        Args:
            bucket: Destination bucket
            key: Object key
            body: Object content, may be empty
        Returns:
            PutObject response
        """
        client = await self._get_client()
        params: Dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
        content_type = content_type_for(key)
        if content_type:
            params["ContentType"] = content_type

        logger.info("Uploading file", key=key, bytes=len(body))
        response = await self._call(client.put_object, **params)
        logger.info("Finished uploading file", key=key)
        return response

    async def create_multipart_upload(self, bucket: str, key: str) -> str:
        """
        Initiate multipart upload.
        Returns:
            upload_id: multipart upload ID issued by the store
        """
        client = await self._get_client()
        params: Dict[str, Any] = {"Bucket": bucket, "Key": key}
        content_type = content_type_for(key)
        if content_type:
            params["ContentType"] = content_type

        response = await self._call(client.create_multipart_upload, **params)
        return response["UploadId"]

    async def upload_part(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        body: bytes,
    ) -> PartResult:
        """Upload one part and return its ETag."""
        client = await self._get_client()
        response = await self._call(
            client.upload_part,
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            PartNumber=part_number,
            Body=body,
        )
        return PartResult(part_number=part_number, etag=response["ETag"])

    async def complete_multipart_upload(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: List[PartResult],
    ) -> Dict[str, Any]:
        """Complete multipart upload by combining all parts."""
        client = await self._get_client()
        multipart_upload = {
            "Parts": [
                part.to_s3()
                for part in sorted(parts, key=lambda p: p.part_number)
            ]
        }
        return await self._call(
            client.complete_multipart_upload,
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload=multipart_upload,
        )

    async def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        """Abort multipart upload and clean up parts."""
        client = await self._get_client()
        await self._call(
            client.abort_multipart_upload,
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
        )

    async def get_object(self, bucket: str, key: str) -> bytes:
        """Read a whole object."""
        client = await self._get_client()
        response = await self._call(client.get_object, Bucket=bucket, Key=key)
        return await self._read_body(response["Body"])

    async def _read_body(self, body: Any) -> bytes:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, body.read)
        finally:
            body.close()

    async def list_objects(self, bucket: str, prefix: Optional[str] = None) -> List[str]:
        """List every key in the bucket, optionally under a prefix."""
        client = await self._get_client()
        params: Dict[str, Any] = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix

        def _list() -> List[str]:
            keys: List[str] = []
            paginator = client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                keys.extend(item["Key"] for item in page.get("Contents", []))
            return keys

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _list)

    async def delete_objects(self, bucket: str, keys: List[str]) -> Dict[str, Any]:
        """
        Delete the given keys.
        Requests are sent DELETE_BATCH_SIZE keys at a time (the S3 limit);
        the Deleted and Errors lists of every response are merged.
        """
        client = await self._get_client()
        merged: Dict[str, Any] = {"Deleted": [], "Errors": []}
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            response = await self._call(
                client.delete_objects,
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in batch]},
            )
            merged["Deleted"].extend(response.get("Deleted", []))
            merged["Errors"].extend(response.get("Errors", []))
        return merged
