"""Storage client configuration (S3 and S3-compatible providers)."""

from typing import Optional
import boto3
from botocore.client import BaseClient
from botocore.config import Config
from .settings import Settings, settings as default_settings
from ..schemas.credential import Credentials
from ..utils.constants import StorageProvider


def get_storage_client(
    credentials: Credentials, settings: Optional[Settings] = None
) -> BaseClient:
    """
    Get storage client based on configured provider.
    Returns boto3 client configured for the selected storage provider.
    """
    settings = settings or default_settings
    provider = settings.storage_provider
    config = Config(
        signature_version="s3v4",
        max_pool_connections=settings.max_pool_connections,
    )

    if provider == StorageProvider.S3:
        endpoint_url = credentials.endpoint_url or settings.s3_endpoint_url
    elif provider == StorageProvider.WASABI:
        endpoint_url = credentials.endpoint_url or settings.wasabi_endpoint
    else:
        raise ValueError(f"Unsupported storage provider: {provider}")

    return boto3.client(
        "s3",
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key.get_secret_value(),
        region_name=credentials.region,
        endpoint_url=endpoint_url,
        config=config,
    )
