from pathlib import Path

import pytest

from src.fademerge.engine.merge_engine import MergeEngine
from src.fademerge.media.workspace_store import Workspace
from src.fademerge.merge.merge_errors import MergeEngineError
from src.fademerge.merge.merge_models import FetchedAsset, MergeJob
from tests.mocks.pipeline import RecordingEngine


def _inputs(tmp_path: Path) -> tuple[Path, Path, Path]:
    paths = []
    for ordinal, name in enumerate(("intro", "main", "outro")):
        path = tmp_path / f"{ordinal}_{name}.mp3"
        path.write_bytes(b"audio")
        paths.append(path)
    return paths[0], paths[1], paths[2]


@pytest.mark.asyncio
async def test_merge_probes_outro_and_runs_graph(tmp_path) -> None:
    intro, main, outro = _inputs(tmp_path)
    engine = RecordingEngine()
    probe = RecordingEngine(output="16.000000\n", write_output=False)
    output = tmp_path / "output" / "merged.mp3"

    await MergeEngine(engine=engine, probe=probe).merge(intro, main, outro, output)

    assert probe.calls[0][-1] == str(outro)
    args = engine.calls[0]
    inputs = [args[i + 1] for i, value in enumerate(args) if value == "-i"]
    assert inputs == [str(intro), str(main), str(outro)]
    assert "afade=t=out:st=14:d=2" in args[args.index("-filter_complex") + 1]
    assert output.read_bytes() == b"ID3merged"


@pytest.mark.asyncio
async def test_nonzero_exit_maps_to_merge_engine_error(tmp_path, caplog) -> None:
    intro, main, outro = _inputs(tmp_path)
    engine = RecordingEngine(exit_code=1, diagnostics="Invalid data found when processing input")
    probe = RecordingEngine(output="5.0", write_output=False)

    with pytest.raises(MergeEngineError) as exc_info:
        await MergeEngine(engine=engine, probe=probe).merge(
            intro, main, outro, tmp_path / "merged.mp3"
        )

    assert exc_info.value.exit_code == 1
    assert "Invalid data" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_timeout_and_signal_map_to_merge_engine_error(tmp_path) -> None:
    intro, main, outro = _inputs(tmp_path)
    probe = RecordingEngine(output="5.0", write_output=False)

    with pytest.raises(MergeEngineError, match="timed out"):
        await MergeEngine(engine=RecordingEngine(timed_out=True, exit_code=-9), probe=probe).merge(
            intro, main, outro, tmp_path / "merged.mp3"
        )
    with pytest.raises(MergeEngineError, match="signal 9"):
        await MergeEngine(engine=RecordingEngine(exit_code=-9), probe=probe).merge(
            intro, main, outro, tmp_path / "merged.mp3"
        )


@pytest.mark.asyncio
async def test_missing_output_is_an_error(tmp_path) -> None:
    intro, main, outro = _inputs(tmp_path)
    engine = RecordingEngine(write_output=False)
    probe = RecordingEngine(output="5.0", write_output=False)

    with pytest.raises(MergeEngineError):
        await MergeEngine(engine=engine, probe=probe).merge(
            intro, main, outro, tmp_path / "merged.mp3"
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("probe_output,exit_code", [("", 0), ("N/A", 0), ("5.0", 1)])
async def test_failed_probe_skips_merge(tmp_path, probe_output, exit_code) -> None:
    intro, main, outro = _inputs(tmp_path)
    engine = RecordingEngine()
    probe = RecordingEngine(output=probe_output, exit_code=exit_code, write_output=False)

    with pytest.raises(MergeEngineError):
        await MergeEngine(engine=engine, probe=probe).merge(
            intro, main, outro, tmp_path / "merged.mp3"
        )

    assert engine.calls == []


@pytest.mark.asyncio
async def test_run_job_uses_ordinal_roles(tmp_path) -> None:
    intro, main, outro = _inputs(tmp_path)
    engine = RecordingEngine()
    probe = RecordingEngine(output="3.0", write_output=False)
    job = MergeJob(
        workspace=Workspace(id="ws", root=tmp_path),
        assets=tuple(
            FetchedAsset(source_url=f"https://cdn.example/{p.name}", local_path=p, ordinal=i)
            for i, p in enumerate((intro, main, outro))
        ),
        output_path=tmp_path / "output" / "merged.mp3",
    )

    produced = await MergeEngine(engine=engine, probe=probe).run_job(job)

    assert produced == job.output_path
    args = engine.calls[0]
    assert [args[i + 1] for i, v in enumerate(args) if v == "-i"] == [str(intro), str(main), str(outro)]
