"""Dependency wiring helpers."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from .config import AppConfig
from .engine.admission_queue import AdmissionQueue
from .engine.ffmpeg_engine import FFmpegEngine
from .engine.filter_graph import FilterGraphSpec
from .engine.merge_engine import MergeEngine
from .media.fetcher import Fetcher
from .media.workspace_store import WorkspaceStore
from .merge.merge_api import router as merge_router
from .merge.merge_service import MergeService
from .merge.validation import RequestValidator
from .storage.publisher import Publisher, build_s3_client


def build_merge_service(config: AppConfig, *, s3_client: Any | None = None) -> MergeService:
    """Assemble the pipeline from configuration."""
    merge_engine = MergeEngine(
        engine=FFmpegEngine(binary=config.ffmpeg_binary),
        probe=FFmpegEngine(binary=config.ffprobe_binary),
        graph=FilterGraphSpec.from_config(config),
        timeout_seconds=config.merge_timeout_seconds or None,
    )
    return MergeService(
        validator=RequestValidator(default_bucket=config.default_bucket),
        workspaces=WorkspaceStore(
            scratch_root=config.scratch_root,
            prefix=config.workspace_prefix,
        ),
        fetcher=Fetcher(
            timeout_seconds=config.fetch_timeout_seconds,
            chunk_size=config.fetch_chunk_size,
        ),
        queue=AdmissionQueue(merge_engine.run_job, limit=config.merge_concurrency),
        publisher=Publisher(
            client=s3_client if s3_client is not None else build_s3_client(config),
            public_base_url=config.public_url_base,
            content_type=config.content_type,
        ),
    )


def include_routers(app: FastAPI, config: AppConfig, *, s3_client: Any | None = None) -> None:
    """Mount module routers and attach services."""
    merge_service = build_merge_service(config, s3_client=s3_client)

    app.state.config = config
    app.state.merge_service = merge_service
    app.state.max_body_bytes = config.max_body_bytes

    app.include_router(merge_router)
