"""Merge engine invoker: runs the fade/concat/loudnorm graph over three segments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..merge.merge_errors import MergeEngineError
from ..merge.merge_models import MergeJob
from .engine_base import EngineAdapter, EngineRunResult
from .filter_graph import FilterGraphSpec, probe_duration_args

logger = logging.getLogger(__name__)

DIAGNOSTICS_TAIL = 2000


@dataclass(slots=True)
class MergeEngine:
    """Invoke the external engine for one merge and map its exit status."""

    engine: EngineAdapter
    probe: EngineAdapter
    graph: FilterGraphSpec = field(default_factory=FilterGraphSpec)
    timeout_seconds: float | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def run_job(self, job: MergeJob) -> Path:
        """Admission queue entry point; returns the produced artifact path."""
        await self.merge(
            job.intro.local_path,
            job.main.local_path,
            job.outro.local_path,
            job.output_path,
            cwd=job.workspace.root,
        )
        return job.output_path

    async def merge(
        self,
        intro: Path,
        main: Path,
        outro: Path,
        output: Path,
        *,
        cwd: Path | None = None,
    ) -> None:
        """Write the merged track to ``output`` or raise :class:`MergeEngineError`."""
        outro_duration = await self.probe_duration(outro)
        output.parent.mkdir(parents=True, exist_ok=True)
        args = self.graph.command(intro, main, outro, output, outro_duration=outro_duration)

        self.log.info(
            "merge.engine.start",
            extra={"output": str(output), "mode": str(self.graph.mode), "outro_duration": outro_duration},
        )
        result = await self.engine.run(args, cwd=cwd, timeout=self.timeout_seconds)
        if not result.ok:
            self._log_failure("merge.engine.failed", result)
            raise MergeEngineError(_failure_message("merge engine", result), exit_code=result.exit_code)
        if not output.is_file():
            raise MergeEngineError("merge engine reported success but produced no output", exit_code=0)

        self.log.debug("merge.engine.diagnostics", extra={"stderr": _tail(result.diagnostics)})
        self.log.info("merge.engine.completed", extra={"output": str(output)})

    async def probe_duration(self, path: Path) -> float:
        """Return the duration of ``path`` in seconds as reported by the probe."""
        result = await self.probe.run(probe_duration_args(path), timeout=self.timeout_seconds)
        if not result.ok:
            self._log_failure("merge.engine.probe_failed", result)
            raise MergeEngineError(_failure_message("probe", result), exit_code=result.exit_code)
        text = result.output.strip().splitlines()[-1] if result.output.strip() else ""
        try:
            duration = float(text)
        except ValueError as exc:
            raise MergeEngineError(f"probe returned no duration for {path.name}", exit_code=0) from exc
        if duration < 0:
            raise MergeEngineError(f"probe returned negative duration for {path.name}", exit_code=0)
        return duration

    def _log_failure(self, event: str, result: EngineRunResult) -> None:
        self.log.error(
            event,
            extra={
                "exit_code": result.exit_code,
                "timed_out": result.timed_out,
                "stderr": _tail(result.diagnostics),
            },
        )


def _failure_message(name: str, result: EngineRunResult) -> str:
    if result.timed_out:
        return f"{name} timed out"
    if result.exit_code is not None and result.exit_code < 0:
        return f"{name} terminated by signal {-result.exit_code}"
    return f"{name} exited with {result.exit_code}"


def _tail(text: str) -> str:
    return text[-DIAGNOSTICS_TAIL:]
