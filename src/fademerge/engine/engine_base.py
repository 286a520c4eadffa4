"""Abstract external engine adapter definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class EngineRunResult:
    """Exit status and captured diagnostics of one engine invocation."""

    exit_code: int | None
    diagnostics: str
    output: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.exit_code == 0


class EngineAdapter(ABC):
    """Base interface for external processing engines."""

    @abstractmethod
    async def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> EngineRunResult:
        """Run the engine with ``args`` and report how it exited."""
