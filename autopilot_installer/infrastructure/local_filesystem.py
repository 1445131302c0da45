"""Filesystem port backed by the local disk."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from autopilot_installer.infrastructure.fs_atomic import atomic_rename


class LocalFilesystem:
    def exists(self, path: Path) -> bool:
        # dangling symlinks still occupy the name
        return path.exists() or path.is_symlink()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def list_names(self, path: Path) -> list[str]:
        if not path.is_dir():
            return []
        return sorted(child.name for child in path.iterdir())

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def is_writable(self, path: Path) -> bool:
        return os.access(str(path), os.W_OK | os.X_OK)

    def move(self, src: Path, dst: Path) -> None:
        atomic_rename(src, dst)

    def copy(self, src: Path, dst: Path) -> None:
        if src.is_dir() and not src.is_symlink():
            shutil.copytree(src, dst, symlinks=True)
        else:
            shutil.copy2(src, dst, follow_symlinks=False)

    def remove(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
