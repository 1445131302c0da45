"""Application ports for the transactional installer.

Pure contracts only. Concrete bindings live in ``autopilot_installer.infrastructure``
and are assembled by ``infrastructure.wiring``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class ContentSource(Protocol):
    reference: str

    def describe(self) -> str: ...

    def fetch(self, scratch: Path) -> Path:
        """Materialize the template tree under ``scratch`` and return its root.

        Raises ``SourceUnavailable`` when the tree cannot be produced.
        """
        ...


@dataclass(frozen=True)
class DependencyResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DependencyInstaller(Protocol):
    command: str

    def available(self) -> bool: ...

    def install(self, cwd: Path) -> DependencyResult: ...


class Filesystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def list_names(self, path: Path) -> list[str]: ...

    def make_dirs(self, path: Path) -> None: ...

    def is_writable(self, path: Path) -> bool: ...

    def move(self, src: Path, dst: Path) -> None: ...

    def copy(self, src: Path, dst: Path) -> None: ...

    def remove(self, path: Path) -> None: ...


class ProgressReporter(Protocol):
    def step(self, message: str) -> None: ...

    def ok(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class NullReporter:
    def step(self, message: str) -> None:
        pass

    def ok(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass
