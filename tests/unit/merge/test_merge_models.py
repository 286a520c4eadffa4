from pathlib import Path

import pytest

from src.fademerge.media.workspace_store import Workspace
from src.fademerge.merge.merge_models import (
    FetchedAsset,
    MergeContext,
    MergeJob,
    PipelineState,
)


def _asset(ordinal: int) -> FetchedAsset:
    return FetchedAsset(
        source_url=f"https://cdn.example/{ordinal}.mp3",
        local_path=Path(f"/tmp/{ordinal}.mp3"),
        ordinal=ordinal,
    )


def test_merge_job_exposes_segments_by_role(tmp_path) -> None:
    job = MergeJob(
        workspace=Workspace(id="ws", root=tmp_path),
        assets=(_asset(0), _asset(1), _asset(2)),
        output_path=tmp_path / "merged.mp3",
    )

    assert job.intro.ordinal == 0
    assert job.main.ordinal == 1
    assert job.outro.ordinal == 2


@pytest.mark.parametrize("ordinals", [(1, 0, 2), (0, 1), (0, 1, 2, 2)])
def test_merge_job_rejects_reordered_or_missing_assets(tmp_path, ordinals) -> None:
    with pytest.raises(ValueError):
        MergeJob(
            workspace=Workspace(id="ws", root=tmp_path),
            assets=tuple(_asset(ordinal) for ordinal in ordinals),
            output_path=tmp_path / "merged.mp3",
        )


def test_context_tracks_state_history() -> None:
    ctx = MergeContext(request_id="req")
    assert ctx.state is None

    ctx.advance(PipelineState.VALIDATING)
    ctx.advance(PipelineState.FETCHING)

    assert ctx.state is PipelineState.FETCHING
    assert ctx.history == [PipelineState.VALIDATING, PipelineState.FETCHING]
