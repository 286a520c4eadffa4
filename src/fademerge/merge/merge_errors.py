"""Domain-specific exceptions for the merge pipeline."""

from __future__ import annotations

from .merge_models import FailureReason


class MergePipelineError(Exception):
    """Base class for merge pipeline errors."""

    failure_reason: FailureReason = FailureReason.INTERNAL_ERROR


class InvalidRequestError(MergePipelineError):
    """Raised when the request does not name 3 inputs and an output."""

    failure_reason = FailureReason.INVALID_REQUEST


class FetchError(MergePipelineError):
    """Raised when a source segment cannot be downloaded."""

    failure_reason = FailureReason.FETCH_ERROR


class MergeEngineError(MergePipelineError):
    """Raised when the external engine exits non-zero or is terminated."""

    failure_reason = FailureReason.MERGE_ENGINE_ERROR

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class PublishError(MergePipelineError):
    """Raised when the object store rejects or fails the upload."""

    failure_reason = FailureReason.PUBLISH_ERROR


class CleanupError(MergePipelineError):
    """Raised when a workspace cannot be removed; logged, never surfaced."""
