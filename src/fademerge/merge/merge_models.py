"""Data structures for the merge pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..media.workspace_store import Workspace

SEGMENT_COUNT = 3


class Segment(IntEnum):
    """Positional role of a source segment; the filter graph relies on it."""

    INTRO = 0
    MAIN = 1
    OUTRO = 2


class PipelineState(StrEnum):
    """Lifecycle states of a single merge request."""

    VALIDATING = "validating"
    FETCHING = "fetching"
    QUEUED = "queued"
    MERGING = "merging"
    PUBLISHING = "publishing"
    CLEANING_UP = "cleaning_up"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureReason(StrEnum):
    """Stable error kinds returned to callers."""

    INVALID_REQUEST = "invalid_request"
    FETCH_ERROR = "fetch_error"
    MERGE_ENGINE_ERROR = "merge_engine_error"
    PUBLISH_ERROR = "publish_error"
    INTERNAL_ERROR = "internal_error"


@dataclass(slots=True, frozen=True)
class MergeRequest:
    """Validated request: intro, main and outro locators plus destination."""

    inputs: tuple[str, str, str]
    output_name: str
    bucket: str


@dataclass(slots=True, frozen=True)
class FetchedAsset:
    """A source segment downloaded into a workspace."""

    source_url: str
    local_path: Path
    ordinal: int


@dataclass(slots=True)
class MergeJob:
    """One unit of work admitted to the merge queue."""

    workspace: "Workspace"
    assets: tuple[FetchedAsset, ...]
    output_path: Path

    def __post_init__(self) -> None:
        ordinals = [asset.ordinal for asset in self.assets]
        if ordinals != [segment.value for segment in Segment]:
            raise ValueError(
                f"MergeJob requires assets in intro/main/outro order, got ordinals {ordinals}"
            )

    @property
    def intro(self) -> FetchedAsset:
        return self.assets[Segment.INTRO]

    @property
    def main(self) -> FetchedAsset:
        return self.assets[Segment.MAIN]

    @property
    def outro(self) -> FetchedAsset:
        return self.assets[Segment.OUTRO]


@dataclass(slots=True, frozen=True)
class PublishedArtifact:
    """Location of the merged track in the object store."""

    bucket: str
    key: str
    url: str


@dataclass(slots=True, frozen=True)
class MergeOutcome:
    """Structured result handed back to the caller."""

    success: bool
    url: str | None = None
    failure_reason: FailureReason | None = None
    message: str | None = None

    @classmethod
    def completed(cls, url: str) -> "MergeOutcome":
        return cls(success=True, url=url)

    @classmethod
    def failed(cls, reason: FailureReason, message: str) -> "MergeOutcome":
        return cls(success=False, failure_reason=reason, message=message)


@dataclass(slots=True)
class MergeContext:
    """Aggregated data tracked across one request's lifecycle."""

    request_id: str
    request: MergeRequest | None = None
    workspace: "Workspace | None" = None
    assets: list[FetchedAsset] = field(default_factory=list)
    artifact: PublishedArtifact | None = None
    history: list[PipelineState] = field(default_factory=list)

    @property
    def state(self) -> PipelineState | None:
        return self.history[-1] if self.history else None

    def advance(self, state: PipelineState) -> None:
        self.history.append(state)
