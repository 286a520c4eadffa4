"""Subprocess adapter for ffmpeg-family executables."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..merge.merge_errors import MergeEngineError
from .engine_base import EngineAdapter, EngineRunResult

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FFmpegEngine(EngineAdapter):
    """Spawn ``binary`` without blocking the event loop.

    The child never outlives the call: a timeout or a cancelled caller kills
    and reaps it before control returns.
    """

    binary: str = "ffmpeg"
    log: logging.Logger = field(default_factory=lambda: logger)

    async def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> EngineRunResult:
        cmd = [self.binary, *args]
        self.log.debug("engine.spawn", extra={"cmd": cmd, "cwd": str(cwd) if cwd else None})
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as exc:
            self.log.error("engine.spawn_failed", extra={"binary": self.binary, "error": str(exc)})
            raise MergeEngineError("merge engine unavailable") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout or None)
        except asyncio.TimeoutError:
            _kill(proc)
            _, stderr = await proc.communicate()
            self.log.warning(
                "engine.timeout",
                extra={"binary": self.binary, "timeout_seconds": timeout},
            )
            return EngineRunResult(
                exit_code=proc.returncode,
                diagnostics=stderr.decode("utf-8", errors="replace"),
                timed_out=True,
            )
        except BaseException:
            if proc.returncode is None:
                _kill(proc)
                await proc.wait()
                self.log.warning("engine.aborted", extra={"binary": self.binary, "pid": proc.pid})
            raise

        return EngineRunResult(
            exit_code=proc.returncode,
            diagnostics=stderr.decode("utf-8", errors="replace"),
            output=stdout.decode("utf-8", errors="replace"),
        )


def _kill(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
