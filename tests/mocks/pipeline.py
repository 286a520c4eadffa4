"""Test doubles for the merge pipeline collaborators."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from src.fademerge.engine.engine_base import EngineAdapter, EngineRunResult


class RecordingEngine(EngineAdapter):
    """Engine adapter that records arguments and optionally writes the output file."""

    def __init__(
        self,
        *,
        exit_code: int = 0,
        diagnostics: str = "",
        output: str = "",
        timed_out: bool = False,
        write_output: bool = True,
        delay: float = 0.0,
    ) -> None:
        self.exit_code = exit_code
        self.diagnostics = diagnostics
        self.output = output
        self.timed_out = timed_out
        self.write_output = write_output
        self.delay = delay
        self.calls: list[list[str]] = []

    async def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> EngineRunResult:
        self.calls.append(list(args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.write_output and self.exit_code == 0 and not self.timed_out:
            Path(args[-1]).write_bytes(b"ID3merged")
        return EngineRunResult(
            exit_code=self.exit_code,
            diagnostics=self.diagnostics,
            output=self.output,
            timed_out=self.timed_out,
        )


class RecordingS3Client:
    """Minimal stand-in for the boto3 S3 client."""

    def __init__(self, *, error: Exception | None = None) -> None:
        self.error = error
        self.uploads: list[dict[str, Any]] = []

    def upload_fileobj(self, body, bucket: str, key: str, ExtraArgs: dict[str, Any] | None = None) -> None:
        if self.error is not None:
            raise self.error
        self.uploads.append(
            {"bucket": bucket, "key": key, "data": body.read(), "extra": ExtraArgs or {}}
        )
