"""Pipeline orchestrator: validate, fetch, merge, publish, clean up."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

import structlog

from ..engine.admission_queue import AdmissionQueue
from ..media.fetcher import Fetcher
from ..media.workspace_store import Workspace, WorkspaceStore
from ..storage.publisher import Publisher
from .merge_errors import InvalidRequestError, MergePipelineError
from .merge_models import (
    FailureReason,
    FetchedAsset,
    MergeContext,
    MergeJob,
    MergeOutcome,
    MergeRequest,
    PipelineState,
    PublishedArtifact,
)
from .validation import RequestValidator

KNOWN_AUDIO_SUFFIXES = {".mp3", ".m4a", ".aac", ".ogg", ".opus", ".wav", ".flac"}


@dataclass(slots=True)
class MergeService:
    """Coordinates one merge request end to end."""

    validator: RequestValidator
    workspaces: WorkspaceStore
    fetcher: Fetcher
    queue: AdmissionQueue[MergeJob, Path]
    publisher: Publisher
    log: Any = field(default_factory=lambda: structlog.get_logger(__name__))

    async def run(
        self,
        files: Any,
        output: Any,
        bucket: Any = None,
        *,
        context: MergeContext | None = None,
    ) -> MergeOutcome:
        """Execute the pipeline and return a structured outcome; never raises
        for pipeline failures."""
        ctx = context or MergeContext(request_id=uuid.uuid4().hex)
        with structlog.contextvars.bound_contextvars(request_id=ctx.request_id):
            self._advance(ctx, PipelineState.VALIDATING)
            try:
                ctx.request = self.validator.validate(files, output, bucket)
            except InvalidRequestError as exc:
                self._advance(ctx, PipelineState.FAILED)
                self.log.warning("merge.request.rejected", reason=str(exc))
                return MergeOutcome.failed(exc.failure_reason, str(exc))

            try:
                async with self.workspaces.workspace() as workspace:
                    ctx.workspace = workspace
                    outcome = await self._run_in_workspace(ctx, ctx.request, workspace)
            except OSError:
                self._advance(ctx, PipelineState.FAILED)
                self.log.exception("merge.workspace.allocation_failed")
                return MergeOutcome.failed(FailureReason.INTERNAL_ERROR, "internal error")

            self._advance(ctx, PipelineState.COMPLETED if outcome.success else PipelineState.FAILED)
            return outcome

    async def _run_in_workspace(
        self,
        ctx: MergeContext,
        request: MergeRequest,
        workspace: Workspace,
    ) -> MergeOutcome:
        """Run the stages; the caller's workspace scope removes the directory."""
        try:
            artifact = await self._execute(ctx, request, workspace)
        except MergePipelineError as exc:
            self.log.warning(
                "merge.pipeline.failed",
                failure_reason=str(exc.failure_reason),
                stage=str(ctx.state),
                error=str(exc),
            )
            return MergeOutcome.failed(exc.failure_reason, str(exc))
        except Exception:
            self.log.exception("merge.pipeline.unexpected_error", stage=str(ctx.state))
            return MergeOutcome.failed(FailureReason.INTERNAL_ERROR, "internal error")
        finally:
            self._advance(ctx, PipelineState.CLEANING_UP)
        ctx.artifact = artifact
        return MergeOutcome.completed(artifact.url)

    async def _execute(
        self,
        ctx: MergeContext,
        request: MergeRequest,
        workspace: Workspace,
    ) -> PublishedArtifact:
        self._advance(ctx, PipelineState.FETCHING)
        ctx.assets = await self._fetch_all(request, workspace)

        job = MergeJob(
            workspace=workspace,
            assets=tuple(ctx.assets),
            output_path=workspace.output_dir / artifact_filename(request.output_name),
        )
        self._advance(ctx, PipelineState.QUEUED)
        artifact_path = await self.queue.submit(
            job, on_admitted=lambda _job: self._advance(ctx, PipelineState.MERGING)
        )

        self._advance(ctx, PipelineState.PUBLISHING)
        return await self.publisher.publish(request.bucket, request.output_name, artifact_path)

    async def _fetch_all(self, request: MergeRequest, workspace: Workspace) -> list[FetchedAsset]:
        """Fetch every segment concurrently; let all finish, then fail on the first error."""
        results = await asyncio.gather(
            *(
                self.fetcher.fetch(url, workspace.inputs_dir, ordinal=ordinal)
                for ordinal, url in enumerate(request.inputs)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return sorted(results, key=lambda asset: asset.ordinal)

    def _advance(self, ctx: MergeContext, state: PipelineState) -> None:
        ctx.advance(state)
        self.log.debug("merge.pipeline.state", state=str(state))


def artifact_filename(output_name: str) -> str:
    """Local file name for the merged track; never derived from caller paths."""
    suffix = PurePosixPath(output_name).suffix.lower()
    if suffix not in KNOWN_AUDIO_SUFFIXES:
        suffix = ".mp3"
    return f"merged{suffix}"
