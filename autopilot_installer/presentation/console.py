from __future__ import annotations

import json
import sys
from typing import Sequence, TextIO

from autopilot_installer.domain.errors import InstallerError
from autopilot_installer.domain.models import (
    BackupRecord,
    InstallReport,
    PlannedEntry,
    RollbackSummary,
)

BOX_WIDTH = 59


def eprint(*args, **kwargs):
    print(*args, file=sys.stderr, **kwargs)


class ConsoleReporter:
    """Progress lines for a human watching the install."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def _print(self, text: str) -> None:
        print(text, file=self._stream or sys.stdout)

    def step(self, message: str) -> None:
        self._print("")
        self._print(message)

    def ok(self, message: str) -> None:
        self._print(f"  ✓ {message}")

    def info(self, message: str) -> None:
        self._print(f"  ℹ️  {message}")

    def warn(self, message: str) -> None:
        self._print(f"  ⚠️  {message}")

    def error(self, message: str) -> None:
        eprint("")
        eprint(f"❌ {message}")


def _box(line: str) -> list[str]:
    return [
        "╔" + "═" * BOX_WIDTH + "╗",
        "║" + " " * BOX_WIDTH + "║",
        "║  " + line.ljust(BOX_WIDTH - 2) + "║",
        "║" + " " * BOX_WIDTH + "║",
        "╚" + "═" * BOX_WIDTH + "╝",
    ]


def render_banner(title: str) -> str:
    return "\n".join(["", *_box(title), ""])


def render_plan(target: str, planned: Sequence[PlannedEntry]) -> str:
    lines = ["", "📦 Installation Plan:", f"   → Target: {target}"]
    for item in planned:
        lines.append(f"   → {item.entry.display_name}")
    conflicts = [item for item in planned if item.exists]
    for item in conflicts:
        lines.append(f"   ⚠️  Will backup existing: {item.entry.display_name}")
    if conflicts:
        lines.append("   ℹ️  Backups will be created with timestamp suffix")
    return "\n".join(lines)


def render_backups(records: Sequence[BackupRecord]) -> str:
    if not records:
        return "No backups found."
    lines = ["📂 Backups:"]
    for record in records:
        lines.append(f"  • {record.backup.name}")
    return "\n".join(lines)


def render_success(report: InstallReport, *, issues_url: str | None = None) -> str:
    lines = ["", *_box("✨ Autopilot template installed successfully!"), ""]
    lines.append("📦 Installed:")
    lines.append(f"  ✓ {report.counts.skills} skills")
    lines.append(f"  ✓ {report.counts.agents} agents")
    lines.append(f"  ✓ {report.counts.commands} slash commands")
    if report.counts.dependencies_installed:
        lines.append("  ✓ Hook dependencies")

    if report.backups:
        lines.append("")
        lines.append("📂 Backups created:")
        for record in report.backups:
            lines.append(f"  • {record.backup.name}")

    if report.warnings:
        lines.append("")
        lines.append("⚠️  Warnings:")
        for warning in report.warnings:
            lines.append(f"  • [{warning.kind}] {warning.message}")
            if warning.hint:
                lines.append(f"    Run later: {warning.hint}")

    lines.extend(
        [
            "",
            "🚀 Next steps:",
            f"  1. cd {report.target}",
            "  2. claude",
            "  3. Start coding - skills auto-activate!",
            "",
            "📖 Documentation:",
            "  • ./AUTOPILOT-README.md - Complete guide",
            "  • ./dev/README.md - Dev docs pattern",
            "  • ./.claude/skills/ - Browse available skills",
        ]
    )
    if issues_url:
        lines.extend(["", f"Need help? {issues_url}"])
    lines.append("")
    return "\n".join(lines)


def render_failure(error: InstallerError, rollback: RollbackSummary | None) -> str:
    lines = [f"Reason: {error.reason_code}"]
    if rollback is not None:
        for message in rollback.skipped:
            lines.append(f"  ℹ️  {message}")
        for message in rollback.failures:
            lines.append(f"  ❌ {message}")
    lines.append("")
    if rollback is None or rollback.clean:
        lines.append("Installation cancelled. Your project is unchanged.")
    else:
        lines.append("Installation cancelled. Some changes could not be rolled back; see above.")
    return "\n".join(lines)


def render_report_json(report: InstallReport) -> str:
    return json.dumps(report.as_dict(), indent=2, ensure_ascii=False, sort_keys=True) + "\n"
