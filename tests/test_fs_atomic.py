from __future__ import annotations

import errno
from pathlib import Path

import pytest

from autopilot_installer.infrastructure import fs_atomic


@pytest.mark.installer
def test_atomic_rename_moves_a_directory_tree(tmp_path: Path):
    src = tmp_path / ".claude"
    (src / "skills").mkdir(parents=True)
    (src / "skills" / "SKILL.md").write_text("x\n", encoding="utf-8")
    dst = tmp_path / ".claude.backup.20250101-000000"

    fs_atomic.atomic_rename(src, dst)

    assert not src.exists()
    assert (dst / "skills" / "SKILL.md").read_text(encoding="utf-8") == "x\n"


@pytest.mark.installer
def test_atomic_rename_never_replaces_an_existing_file(tmp_path: Path):
    src = tmp_path / "LICENSE"
    dst = tmp_path / "LICENSE.backup.20250101-000000"
    src.write_text("new\n", encoding="utf-8")
    dst.write_text("older backup\n", encoding="utf-8")

    with pytest.raises(FileExistsError):
        fs_atomic.atomic_rename(src, dst)

    assert src.read_text(encoding="utf-8") == "new\n"
    assert dst.read_text(encoding="utf-8") == "older backup\n"


@pytest.mark.installer
def test_bounded_retry_retries_retryable_rename(monkeypatch: pytest.MonkeyPatch):
    calls = {"n": 0}

    def flaky() -> str:
        calls["n"] += 1
        if calls["n"] == 1:
            raise OSError(errno.EACCES, "locked")
        return "ok"

    assert fs_atomic.bounded_retry(flaky, attempts=3, backoff_ms=1) == "ok"
    assert calls["n"] == 2


@pytest.mark.installer
def test_bounded_retry_does_not_retry_other_errors():
    calls = {"n": 0}

    def missing() -> None:
        calls["n"] += 1
        raise FileNotFoundError(errno.ENOENT, "gone")

    with pytest.raises(FileNotFoundError):
        fs_atomic.bounded_retry(missing, attempts=5, backoff_ms=1)
    assert calls["n"] == 1
