import io
import json
import logging
from pathlib import Path

import pytest
import structlog

from src.fademerge.engine.merge_engine import MergeEngine
from src.fademerge.logging import _ServiceHandler, configure_logging
from src.fademerge.merge.merge_errors import MergeEngineError
from tests.mocks.pipeline import RecordingEngine


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)
    yield stream
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, _ServiceHandler):
            root.removeHandler(handler)
    structlog.reset_defaults()


def _events(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def _find(events: list[dict], name: str) -> dict:
    return next(event for event in events if event.get("event") == name)


@pytest.mark.asyncio
async def test_engine_failure_diagnostics_reach_rendered_output(tmp_path: Path, log_stream) -> None:
    inputs = []
    for name in ("intro", "main", "outro"):
        path = tmp_path / f"{name}.mp3"
        path.write_bytes(b"audio")
        inputs.append(path)
    engine = RecordingEngine(exit_code=1, diagnostics="Invalid data found when processing input")
    probe = RecordingEngine(output="5.0", write_output=False)

    with pytest.raises(MergeEngineError):
        await MergeEngine(engine=engine, probe=probe).merge(*inputs, tmp_path / "merged.mp3")

    failed = _find(_events(log_stream), "merge.engine.failed")
    assert failed["level"] == "error"
    assert failed["exit_code"] == 1
    assert failed["timed_out"] is False
    assert "Invalid data found" in failed["stderr"]
    assert failed["logger"] == "src.fademerge.engine.merge_engine"


def test_structlog_events_carry_bound_request_id(log_stream) -> None:
    log = structlog.get_logger("src.fademerge.merge.merge_service")

    with structlog.contextvars.bound_contextvars(request_id="req-7"):
        log.warning("merge.pipeline.failed", stage="fetching")

    event = _find(_events(log_stream), "merge.pipeline.failed")
    assert event["request_id"] == "req-7"
    assert event["stage"] == "fetching"
    assert event["level"] == "warning"


def test_configure_logging_replaces_its_own_handler(log_stream) -> None:
    configure_logging("INFO", stream=log_stream)

    installed = [h for h in logging.getLogger().handlers if isinstance(h, _ServiceHandler)]
    assert len(installed) == 1
