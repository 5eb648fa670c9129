"""Credential schemas."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, SecretStr


class Credentials(BaseModel):
    """Resolved access keys and region for one storage client."""

    access_key_id: str
    secret_access_key: SecretStr
    region: str
    endpoint_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)
