from __future__ import annotations

import logging
from typing import Any

import aioboto3

from bytespark.core.config import AppSettings


logger = logging.getLogger(__name__)


class ObjectStorage:
    """Persist binary blobs to the S3-compatible R2 bucket."""

    def __init__(self, settings: AppSettings):
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.r2_bucket)

    def public_url(self, key: str | None) -> str | None:
        domain = self._settings.r2_public_domain
        if not key or not domain:
            return None
        return f"{domain.rstrip('/')}/{key.lstrip('/')}"

    async def put_object(self, *, key: str, body: bytes, content_type: str) -> str | None:
        """Upload ``body`` under ``key``; return the key, or None when skipped or failed."""
        bucket = self._settings.r2_bucket
        if not bucket:
            logger.debug("R2 bucket absent; skipping upload of %s.", key)
            return None

        try:
            session = aioboto3.Session()
            async with session.client("s3", **self._client_kwargs()) as client:
                await client.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                )
            logger.info("Stored object at r2://%s/%s", bucket, key)
            return key
        except Exception as exc:
            logger.warning("Failed to store object %s in R2", key, exc_info=exc)
            return None

    def _client_kwargs(self) -> dict[str, Any]:
        client_kwargs: dict[str, Any] = {"region_name": "auto"}
        endpoint = self._settings.r2_endpoint
        if endpoint:
            client_kwargs["endpoint_url"] = endpoint
        if self._settings.r2_access_key_id and self._settings.r2_secret_access_key:
            client_kwargs["aws_access_key_id"] = self._settings.r2_access_key_id.get_secret_value()
            client_kwargs["aws_secret_access_key"] = (
                self._settings.r2_secret_access_key.get_secret_value()
            )
        return client_kwargs
