import os
import shutil
import time

import pytest

from src.fademerge.media.workspace_store import WorkspaceStore


def test_create_allocates_unique_directories(tmp_path) -> None:
    store = WorkspaceStore(scratch_root=tmp_path / "scratch")

    first = store.create()
    second = store.create()

    assert first.id != second.id
    assert first.root != second.root
    assert first.root.is_dir() and second.root.is_dir()
    assert first.root.parent == tmp_path / "scratch"
    assert first.root.name.startswith("faded-")


def test_destroy_is_idempotent(tmp_path) -> None:
    store = WorkspaceStore(scratch_root=tmp_path)
    workspace = store.create()
    (workspace.inputs_dir).mkdir()
    (workspace.inputs_dir / "0_intro.mp3").write_bytes(b"data")

    assert store.destroy(workspace) is True
    assert not workspace.root.exists()
    assert store.destroy(workspace) is True


def test_destroy_logs_and_swallows_removal_failure(tmp_path, monkeypatch) -> None:
    store = WorkspaceStore(scratch_root=tmp_path)
    workspace = store.create()

    def broken_rmtree(path):
        raise PermissionError("read-only")

    monkeypatch.setattr(shutil, "rmtree", broken_rmtree)

    assert store.destroy(workspace) is False
    assert workspace.root.exists()


@pytest.mark.asyncio
async def test_workspace_scope_releases_on_error(tmp_path) -> None:
    store = WorkspaceStore(scratch_root=tmp_path)
    captured = []

    with pytest.raises(RuntimeError):
        async with store.workspace() as workspace:
            captured.append(workspace)
            (workspace.root / "partial.bin").write_bytes(b"x")
            raise RuntimeError("boom")

    assert captured and not captured[0].root.exists()


def test_purge_stale_only_removes_old_prefixed_dirs(tmp_path) -> None:
    store = WorkspaceStore(scratch_root=tmp_path)
    old = store.create()
    fresh = store.create()
    foreign = tmp_path / "keep-me"
    foreign.mkdir()

    now = time.time()
    os.utime(old.root, (now - 7200, now - 7200))
    os.utime(foreign, (now - 7200, now - 7200))

    assert store.list_stale(3600, now=now) == [old.root]
    assert store.purge_stale(3600, now=now) == 1
    assert not old.root.exists()
    assert fresh.root.exists()
    assert foreign.exists()


def test_list_stale_on_missing_root(tmp_path) -> None:
    store = WorkspaceStore(scratch_root=tmp_path / "absent")

    assert store.list_stale(10) == []
