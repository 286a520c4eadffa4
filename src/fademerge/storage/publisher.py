"""Upload merged artifacts to the S3-compatible object store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import AppConfig
from ..merge.merge_errors import PublishError
from ..merge.merge_models import PublishedArtifact

logger = logging.getLogger(__name__)


def build_s3_client(config: AppConfig) -> Any:
    """Create the boto3 client for R2 (or any S3-compatible endpoint)."""
    return boto3.client(
        service_name="s3",
        endpoint_url=config.r2_endpoint,
        aws_access_key_id=config.r2_access_key or None,
        aws_secret_access_key=config.r2_secret_key or None,
        region_name="auto",
        config=Config(signature_version="s3v4"),
    )


@dataclass(slots=True)
class Publisher:
    """Stream a local file to ``bucket/key`` and return its retrieval URL."""

    client: Any
    public_base_url: str
    content_type: str = "audio/mpeg"
    log: logging.Logger = field(default_factory=lambda: logger)

    def url_for(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/{bucket}/{key.lstrip('/')}"

    async def publish(self, bucket: str, key: str, path: Path) -> PublishedArtifact:
        """Upload ``path`` or raise :class:`PublishError`."""
        try:
            size = path.stat().st_size
        except FileNotFoundError as exc:
            raise PublishError(f"artifact {path.name} does not exist") from exc
        except OSError as exc:
            raise PublishError(f"artifact {path.name} is not readable") from exc

        self.log.info(
            "merge.publish.start",
            extra={"bucket": bucket, "key": key, "size_bytes": size},
        )
        try:
            await asyncio.to_thread(self._upload, bucket, key, path)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "unknown")
            self.log.error(
                "merge.publish.rejected",
                extra={"bucket": bucket, "key": key, "error_code": code},
            )
            raise PublishError(f"object store rejected {bucket}/{key}: {code}") from exc
        except (BotoCoreError, OSError) as exc:
            self.log.error(
                "merge.publish.failed",
                extra={"bucket": bucket, "key": key, "error": str(exc)},
            )
            raise PublishError(f"upload of {bucket}/{key} failed") from exc

        artifact = PublishedArtifact(bucket=bucket, key=key, url=self.url_for(bucket, key))
        self.log.info("merge.publish.completed", extra={"url": artifact.url})
        return artifact

    def _upload(self, bucket: str, key: str, path: Path) -> None:
        with path.open("rb") as body:
            self.client.upload_fileobj(
                body,
                bucket,
                key,
                ExtraArgs={"ContentType": self.content_type},
            )
