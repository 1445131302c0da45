"""Pytest configuration for installer tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from autopilot_installer.application.use_cases.transactional_install import TransactionalInstaller
from autopilot_installer.infrastructure.content_sources import LocalDirectorySource
from autopilot_installer.infrastructure.local_filesystem import LocalFilesystem

from .util import make_template

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5)


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    return make_template(tmp_path / "template")


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    target = tmp_path / "project"
    (target / "src").mkdir(parents=True)
    (target / "src" / "app.py").write_text("print('user code')\n", encoding="utf-8")
    (target / "README.md").write_text("# My project\n", encoding="utf-8")
    return target


@pytest.fixture
def scratch_parent(tmp_path: Path) -> Path:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def make_installer(template_dir: Path, scratch_parent: Path):
    def _make(*, filesystem=None, source=None, clock=lambda: FIXED_NOW) -> TransactionalInstaller:
        return TransactionalInstaller(
            source=source or LocalDirectorySource(template_dir),
            filesystem=filesystem or LocalFilesystem(),
            clock=clock,
            scratch_parent=scratch_parent,
        )

    return _make
