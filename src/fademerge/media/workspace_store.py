"""Per-request scratch workspaces for downloaded segments and merge output."""

from __future__ import annotations

import logging
import shutil
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from ..merge.merge_errors import CleanupError


@dataclass(slots=True, frozen=True)
class Workspace:
    """Scratch directory owned by exactly one in-flight request."""

    id: str
    root: Path

    @property
    def inputs_dir(self) -> Path:
        return self.root / "inputs"

    @property
    def output_dir(self) -> Path:
        return self.root / "output"


@dataclass(slots=True)
class WorkspaceStore:
    """Allocates unique workspaces and guarantees their removal."""

    scratch_root: Path
    prefix: str = "faded-"
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def create(self) -> Workspace:
        """Allocate a fresh directory keyed by a random token."""
        self.scratch_root.mkdir(parents=True, exist_ok=True)
        workspace_id = uuid.uuid4().hex
        root = self.scratch_root / f"{self.prefix}{workspace_id}"
        root.mkdir(exist_ok=False)
        workspace = Workspace(id=workspace_id, root=root)
        self.log.debug(
            "media.workspace.created",
            extra={"workspace_id": workspace_id, "path": str(root)},
        )
        return workspace

    def destroy(self, workspace: Workspace) -> bool:
        """Remove the workspace recursively; idempotent and never raises.

        Returns ``True`` when the directory is gone afterwards.
        """
        if not workspace.root.exists():
            return True
        try:
            self._remove_tree(workspace.root)
        except CleanupError as exc:
            self.log.error(
                "media.workspace.cleanup_failed",
                extra={"workspace_id": workspace.id, "path": str(workspace.root), "error": str(exc)},
            )
            return False
        self.log.debug("media.workspace.destroyed", extra={"workspace_id": workspace.id})
        return True

    @asynccontextmanager
    async def workspace(self) -> AsyncIterator[Workspace]:
        """Acquire a workspace and release it on every exit path."""
        workspace = self.create()
        try:
            yield workspace
        finally:
            self.destroy(workspace)

    def list_stale(self, older_than_seconds: float, *, now: float | None = None) -> list[Path]:
        """Return leftover workspace directories older than the threshold."""
        if not self.scratch_root.is_dir():
            return []
        reference = time.time() if now is None else now
        stale: list[Path] = []
        for entry in self.scratch_root.iterdir():
            if not entry.is_dir() or not entry.name.startswith(self.prefix):
                continue
            try:
                age = reference - entry.stat().st_mtime
            except FileNotFoundError:
                continue
            if age > older_than_seconds:
                stale.append(entry)
        return sorted(stale)

    def purge_stale(self, older_than_seconds: float, *, now: float | None = None) -> int:
        """Remove workspaces abandoned by crashed processes (cron fallback)."""
        removed = 0
        for path in self.list_stale(older_than_seconds, now=now):
            try:
                self._remove_tree(path)
            except CleanupError as exc:
                self.log.warning(
                    "media.workspace.purge_failed",
                    extra={"path": str(path), "error": str(exc)},
                )
                continue
            removed += 1
            self.log.info("media.workspace.purged", extra={"path": str(path)})
        return removed

    @staticmethod
    def _remove_tree(path: Path) -> None:
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise CleanupError(f"failed to remove {path}: {exc}") from exc
