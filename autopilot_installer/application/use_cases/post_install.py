"""Steps that run after the managed entries are in place.

None of these are part of the transaction: a failure here is reported as a
warning and the installed files stay as they are.
"""

from __future__ import annotations

import json
import stat
import subprocess
from pathlib import Path

from autopilot_installer.application.ports.gateways import (
    DependencyInstaller,
    NullReporter,
    ProgressReporter,
)
from autopilot_installer.domain.errors import (
    DependencyWarning,
    InstallerWarning,
    PermissionWarning,
    VerificationWarning,
)
from autopilot_installer.domain.models import ContentCounts, InstallReport

EXECUTABLE_PATTERNS = ("*.sh", "*.py")
EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def install_dependencies(
    target: Path,
    installer: DependencyInstaller,
    hooks_subdir: str,
    reporter: ProgressReporter | None = None,
) -> list[InstallerWarning]:
    reporter = reporter or NullReporter()
    reporter.step("📦 Setting up dependencies...")
    hooks_dir = target / hooks_subdir
    manual = f"cd {hooks_dir} && {installer.command} install"

    if not installer.available():
        reporter.warn(f"Skipping {installer.command} install ({installer.command} not found)")
        return [DependencyWarning(f"{installer.command} not found - hook dependencies not installed", hint=manual)]

    if not hooks_dir.is_dir():
        reporter.warn(f"Hooks directory missing: {hooks_subdir}")
        return [DependencyWarning(f"Hooks directory not found: {hooks_subdir}")]

    reporter.info("Installing hook dependencies...")
    try:
        result = installer.install(hooks_dir)
    except subprocess.TimeoutExpired as exc:
        reporter.warn(f"{installer.command} install timed out")
        return [DependencyWarning(f"{installer.command} install timed out after {exc.timeout}s", hint=manual)]
    except OSError as exc:
        reporter.warn(f"{installer.command} install could not start: {exc}")
        return [DependencyWarning(f"{installer.command} install could not start: {exc}", hint=manual)]

    if not result.ok:
        tail = (result.stderr or result.stdout).strip().splitlines()[-5:]
        reporter.warn(f"{installer.command} install failed (exit {result.returncode})")
        return [
            DependencyWarning(
                f"{installer.command} install failed (exit {result.returncode}): " + " | ".join(tail),
                hint=manual,
            )
        ]

    reporter.ok("Hook dependencies installed")
    return []


def set_permissions(
    target: Path,
    hooks_subdir: str,
    reporter: ProgressReporter | None = None,
) -> list[InstallerWarning]:
    reporter = reporter or NullReporter()
    reporter.step("🔧 Setting permissions...")
    hooks_dir = target / hooks_subdir
    if not hooks_dir.is_dir():
        return []

    warnings: list[InstallerWarning] = []
    for pattern in EXECUTABLE_PATTERNS:
        for script in sorted(hooks_dir.glob(pattern)):
            if not script.is_file():
                continue
            try:
                mode = script.stat().st_mode
                script.chmod(mode | EXEC_BITS)
            except OSError as exc:
                warnings.append(PermissionWarning(f"Could not mark {script.name} executable: {exc}"))

    if warnings:
        reporter.warn(f"Permissions set with {len(warnings)} problem(s)")
    else:
        reporter.ok("Permissions set")
    return warnings


def _count(root: Path, pattern: str) -> int:
    if not root.is_dir():
        return 0
    return sum(1 for p in root.rglob(pattern) if p.is_file())


def _settings_valid(settings: Path) -> bool | None:
    if not settings.is_file():
        return None
    try:
        json.loads(settings.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return False
    return True


def verify_installation(target: Path, hooks_subdir: str = ".claude/hooks") -> ContentCounts:
    config_dir = target / ".claude"
    return ContentCounts(
        skills=_count(config_dir / "skills", "SKILL.md"),
        agents=_count(config_dir / "agents", "*.md"),
        commands=_count(config_dir / "commands", "*.md"),
        settings_valid=_settings_valid(config_dir / "settings.json"),
        dependencies_installed=(target / hooks_subdir / "node_modules").is_dir(),
    )


def finalize_installation(
    report: InstallReport,
    *,
    installer: DependencyInstaller | None,
    hooks_subdir: str,
    reporter: ProgressReporter | None = None,
) -> InstallReport:
    """Dependencies, permissions and verification for a successful run."""
    reporter = reporter or NullReporter()
    if installer is not None:
        report.warnings.extend(install_dependencies(report.target, installer, hooks_subdir, reporter))
    report.warnings.extend(set_permissions(report.target, hooks_subdir, reporter))

    reporter.step("🔍 Verifying installation...")
    counts = verify_installation(report.target, hooks_subdir)
    report.counts = counts
    reporter.ok(f"Skills: {counts.skills}")
    reporter.ok(f"Agents: {counts.agents}")
    reporter.ok(f"Commands: {counts.commands}")
    if counts.settings_valid is False:
        reporter.warn("settings.json may be invalid")
        report.warnings.append(VerificationWarning(".claude/settings.json is not valid JSON"))
    elif counts.settings_valid:
        reporter.ok("settings.json is valid")
    if counts.dependencies_installed:
        reporter.ok("Hook dependencies installed")
    else:
        reporter.warn("Hook dependencies not installed")
    return report
