"""Application configuration for the fade merge service.

Defaults follow the production deployment: R2 as the object store, ffmpeg
from ``PATH`` as the merge engine and a scratch area under the system temp
directory. Secrets are injected via ``FADEMERGE_*`` environment variables or
an optional ``.env`` file.
"""

from __future__ import annotations

import os
import tempfile
from enum import StrEnum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FilterMode(StrEnum):
    """Filter graph policy applied across the concatenation."""

    LOUDNORM = "loudnorm"
    CONCAT = "concat"


def _default_scratch_root() -> Path:
    return Path(tempfile.gettempdir()) / "fademerge"


def _default_concurrency() -> int:
    return max(1, os.cpu_count() or 1)


class AppConfig(BaseSettings):
    """Pydantic settings container for the service layer."""

    model_config = SettingsConfigDict(
        env_prefix="FADEMERGE_",
        env_file=".env",
        extra="ignore",
    )

    r2_endpoint: str = Field(
        default="http://localhost:9000",
        description="S3-compatible endpoint URL; also the base of returned URLs.",
    )
    r2_access_key: str = Field(default="", description="Object store access key id.")
    r2_secret_key: str = Field(default="", description="Object store secret key.")
    public_base_url: str | None = Field(
        default=None,
        description="Optional public base URL overriding the endpoint in returned URLs.",
    )
    default_bucket: str = Field(
        default="main-podcast",
        min_length=1,
        description="Bucket used when the request does not name one.",
    )
    content_type: str = Field(
        default="audio/mpeg",
        description="Content-Type stored with published artifacts.",
    )

    scratch_root: Path = Field(
        default_factory=_default_scratch_root,
        description="Directory under which per-request workspaces are allocated.",
    )
    workspace_prefix: str = Field(
        default="faded-",
        min_length=1,
        description="Name prefix of workspace directories (used by the stale sweep).",
    )
    workspace_stale_seconds: int = Field(
        default=6 * 3600,
        ge=60,
        description="Age after which leftover workspaces are purged by the sweep.",
    )

    fetch_timeout_seconds: float = Field(
        default=180.0,
        gt=0,
        description="Network timeout applied to each segment download.",
    )
    fetch_chunk_size: int = Field(
        default=64 * 1024,
        ge=1024,
        description="Chunk size used when streaming downloads to disk.",
    )

    ffmpeg_binary: str = Field(default="ffmpeg", description="Merge engine executable.")
    ffprobe_binary: str = Field(default="ffprobe", description="Probe executable.")
    merge_concurrency: int = Field(
        default_factory=_default_concurrency,
        ge=1,
        description="Maximum number of merge engine processes running at once.",
    )
    merge_timeout_seconds: float = Field(
        default=600.0,
        ge=0,
        description="Upper bound on a single merge invocation; 0 disables the limit.",
    )
    filter_mode: FilterMode = Field(
        default=FilterMode.LOUDNORM,
        description="Apply loudness normalisation after concatenation or plain concat.",
    )
    fade_in_seconds: float = Field(default=2.0, ge=0)
    fade_out_seconds: float = Field(default=2.0, ge=0)
    loudness_target_i: float = Field(default=-16.0, le=0)
    loudness_true_peak: float = Field(default=-1.5, le=0)
    loudness_range: float = Field(default=11.0, gt=0)
    audio_codec: str = Field(default="libmp3lame")
    audio_bitrate: str = Field(default="192k")
    sample_rate: int = Field(default=44100, ge=8000)

    host: str = Field(default="0.0.0.0", description="Bind address of the HTTP server.")
    port: int = Field(default=3000, ge=1, le=65535, description="Listen port of the HTTP server.")
    max_body_bytes: int = Field(
        default=20 * 1024 * 1024,
        ge=1024,
        description="Largest accepted JSON request body.",
    )
    log_level: str = Field(default="INFO")

    @property
    def public_url_base(self) -> str:
        return (self.public_base_url or self.r2_endpoint).rstrip("/")

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the environment."""

        return cls()


def load_config() -> AppConfig:
    """Load configuration and make sure the scratch root exists."""
    config = AppConfig.build_default()
    config.scratch_root.mkdir(parents=True, exist_ok=True)
    return config


__all__ = ["AppConfig", "FilterMode", "load_config"]
