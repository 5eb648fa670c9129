"""Integration tests: upload service over the boto3-backed repository."""

import pytest
from botocore.exceptions import ClientError
from simplys3.repositories.storage_repo import StorageRepository
from simplys3.services.upload_service import UploadService


@pytest.mark.asyncio
@pytest.mark.integration
async def test_directory_upload_against_client(s3_client, make_settings, tmp_path):
    """
    Test a mixed directory:
    1. Small file goes through put_object
    2. Large file is split into parts and completed in order
    """
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.html").write_bytes(b"<h1>hi</h1>")
    payload = bytes(i % 256 for i in range(95))
    (tmp_path / "video.bin").write_bytes(payload)
    repo = StorageRepository(client=s3_client)
    service = UploadService(repo, make_settings(max_chunk_bytes=20, max_concurrent=2))

    results = await service.upload_directory(tmp_path, "bucket", "backup")

    assert sorted(r.key for r in results) == ["backup/docs/index.html", "backup/video.bin"]
    s3_client.put_object.assert_called_once_with(
        Bucket="bucket", Key="backup/docs/index.html", Body=b"<h1>hi</h1>", ContentType="text/html"
    )
    parts = {c.kwargs["PartNumber"]: c.kwargs["Body"] for c in s3_client.upload_part.call_args_list}
    assert sorted(parts) == [1, 2, 3, 4, 5]
    assert b"".join(parts[n] for n in range(1, 6)) == payload
    completed = s3_client.complete_multipart_upload.call_args.kwargs["MultipartUpload"]["Parts"]
    assert [p["PartNumber"] for p in completed] == [1, 2, 3, 4, 5]
    s3_client.abort_multipart_upload.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_part_aborts_remote_session(s3_client, make_settings, tmp_path):
    """Test a store error on one part aborts the upload on the store."""
    (tmp_path / "big.bin").write_bytes(b"x" * 70)
    failure = ClientError({"Error": {"Code": "SlowDown", "Message": "slow"}}, "UploadPart")

    def upload_part(**kw):
        if kw["PartNumber"] == 5:
            raise failure
        return {"ETag": f'"etag-{kw["PartNumber"]}"'}

    s3_client.upload_part.side_effect = upload_part
    repo = StorageRepository(client=s3_client)
    service = UploadService(repo, make_settings(max_chunk_bytes=10, max_concurrent=3))

    with pytest.raises(ClientError) as exc_info:
        await service.upload_directory(tmp_path, "bucket")

    assert exc_info.value is failure
    s3_client.abort_multipart_upload.assert_called_once_with(
        Bucket="bucket", Key="big.bin", UploadId="upload-1"
    )
    s3_client.complete_multipart_upload.assert_not_called()
