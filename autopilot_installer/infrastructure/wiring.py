"""Composition root: binds the installer ports to concrete adapters."""

from __future__ import annotations

from pathlib import Path

from autopilot_installer.application.ports.gateways import ContentSource, ProgressReporter
from autopilot_installer.application.use_cases.transactional_install import TransactionalInstaller
from autopilot_installer.infrastructure.config_loader import InstallerConfig
from autopilot_installer.infrastructure.content_sources import GitHubArchiveSource, LocalDirectorySource
from autopilot_installer.infrastructure.local_filesystem import LocalFilesystem
from autopilot_installer.infrastructure.npm_installer import NpmDependencyInstaller


def build_content_source(config: InstallerConfig, source_dir: Path | None = None) -> ContentSource:
    if source_dir is not None:
        return LocalDirectorySource(source_dir)
    return GitHubArchiveSource(
        config.repo_owner,
        config.repo_name,
        config.ref,
        timeout=config.timeout_seconds,
        token=config.github_token,
    )


def build_dependency_installer(config: InstallerConfig) -> NpmDependencyInstaller:
    return NpmDependencyInstaller(config.npm_command, timeout_seconds=config.npm_timeout_seconds)


def build_installer(
    config: InstallerConfig,
    *,
    source_dir: Path | None = None,
    reporter: ProgressReporter | None = None,
) -> TransactionalInstaller:
    return TransactionalInstaller(
        source=build_content_source(config, source_dir),
        filesystem=LocalFilesystem(),
        reporter=reporter,
    )
