"""Request validation for merge submissions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from .merge_errors import InvalidRequestError
from .merge_models import SEGMENT_COUNT, MergeRequest

logger = logging.getLogger(__name__)

BUCKET_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")


@dataclass(slots=True)
class RequestValidator:
    """Turn raw request fields into an immutable :class:`MergeRequest`."""

    default_bucket: str

    def validate(self, files: Any, output: Any, bucket: Any = None) -> MergeRequest:
        if not isinstance(files, (list, tuple)) or len(files) != SEGMENT_COUNT:
            logger.warning(
                "merge.request.invalid_inputs",
                extra={"count": len(files) if isinstance(files, (list, tuple)) else None},
            )
            raise InvalidRequestError("3 files and output required")

        inputs: list[str] = []
        for ordinal, locator in enumerate(files):
            if not isinstance(locator, str) or not locator.strip():
                raise InvalidRequestError(f"file {ordinal} must be a non-empty URL")
            locator = locator.strip()
            parsed = urlparse(locator)
            if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
                raise InvalidRequestError(f"file {ordinal} must be an http(s) URL")
            inputs.append(locator)

        if not isinstance(output, str) or not output.strip().lstrip("/"):
            raise InvalidRequestError("3 files and output required")
        output_name = output.strip().lstrip("/")

        if bucket is None or (isinstance(bucket, str) and not bucket.strip()):
            bucket_name = self.default_bucket
        elif isinstance(bucket, str):
            bucket_name = bucket.strip()
        else:
            raise InvalidRequestError("bucket must be a string")
        if not BUCKET_PATTERN.match(bucket_name):
            raise InvalidRequestError(f"invalid bucket name '{bucket_name}'")

        return MergeRequest(
            inputs=(inputs[0], inputs[1], inputs[2]),
            output_name=output_name,
            bucket=bucket_name,
        )
