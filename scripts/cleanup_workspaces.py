"""Cron entry point for purging workspaces left behind by crashed processes."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass

from src.fademerge.config import load_config
from src.fademerge.media.workspace_store import WorkspaceStore


@dataclass(slots=True)
class CleanupSummary:
    workspaces_removed: int
    dry_run: bool


def perform_cleanup(
    *,
    dry_run: bool,
    older_than_seconds: float | None = None,
    now: float | None = None,
) -> CleanupSummary:
    """Execute cleanup logic and return summary counters."""
    config = load_config()
    store = WorkspaceStore(scratch_root=config.scratch_root, prefix=config.workspace_prefix)
    threshold = older_than_seconds if older_than_seconds is not None else config.workspace_stale_seconds

    if dry_run:
        stale = store.list_stale(threshold, now=now)
        return CleanupSummary(workspaces_removed=len(stale), dry_run=True)

    removed = store.purge_stale(threshold, now=now)
    return CleanupSummary(workspaces_removed=removed, dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Purge stale merge workspaces.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    parser.add_argument(
        "--older-than",
        type=float,
        default=None,
        help="Age threshold in seconds (defaults to FADEMERGE_WORKSPACE_STALE_SECONDS).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        summary = perform_cleanup(dry_run=args.dry_run, older_than_seconds=args.older_than)
    except Exception as exc:
        print(f"cleanup failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"cleanup dry-run, workspaces_stale={summary.workspaces_removed}", file=sys.stdout)
    else:
        print(f"cleanup done, workspaces_removed={summary.workspaces_removed}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
