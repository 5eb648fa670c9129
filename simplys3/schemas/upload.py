"""Multipart upload schemas."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from ..utils.constants import UploadStrategy


class PartResult(BaseModel):
    """A part the store has accepted."""

    part_number: int = Field(..., ge=1, description="Part number (1-indexed)")
    etag: str = Field(..., description="ETag returned by the store for this part")

    def to_s3(self) -> Dict[str, object]:
        """Shape expected by CompleteMultipartUpload."""
        return {"PartNumber": self.part_number, "ETag": self.etag}


class UploadSession(BaseModel):
    """
    One in-progress multipart upload.
    Parts are appended batch by batch as they complete.
    """

    bucket: str
    key: str
    upload_id: str = Field(..., description="Upload ID issued by the store")
    parts: List[PartResult] = Field(default_factory=list)

    def add_parts(self, parts: List[PartResult]) -> None:
        self.parts.extend(parts)

    def ordered_parts(self) -> List[PartResult]:
        """Parts sorted by part number."""
        return sorted(self.parts, key=lambda part: part.part_number)


class UploadResult(BaseModel):
    """Outcome of uploading one object."""

    bucket: str
    key: str
    strategy: UploadStrategy
    part_count: int = Field(default=1, ge=1)
    bytes_uploaded: int = Field(default=0, ge=0)
    upload_id: Optional[str] = Field(None, description="Set for multipart uploads only")
