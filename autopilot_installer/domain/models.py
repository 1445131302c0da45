from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from autopilot_installer.domain.errors import InstallerError, InstallerWarning

EntryKind = Literal["dir", "file"]


@dataclass(frozen=True)
class ManagedEntry:
    """One top-level path the installer owns inside a target project."""

    name: str
    kind: EntryKind
    dest_name: str | None = None
    required: bool = False

    @property
    def install_name(self) -> str:
        return self.dest_name or self.name

    @property
    def is_renamed(self) -> bool:
        return self.install_name != self.name

    @property
    def display_name(self) -> str:
        return f"{self.install_name}/" if self.kind == "dir" else self.install_name


# Processing order is fixed; backups and rollback never depend on directory
# enumeration order.
DEFAULT_ENTRIES: tuple[ManagedEntry, ...] = (
    ManagedEntry(".claude", "dir", required=True),
    ManagedEntry("dev", "dir"),
    ManagedEntry("LICENSE", "file"),
    ManagedEntry("README.md", "file", dest_name="AUTOPILOT-README.md"),
)


@dataclass(frozen=True)
class PlannedEntry:
    entry: ManagedEntry
    exists: bool


@dataclass(frozen=True)
class StagedContent:
    root: Path
    reference: str

    def has(self, entry: ManagedEntry) -> bool:
        return (self.root / entry.name).exists()

    def path_of(self, entry: ManagedEntry) -> Path:
        return self.root / entry.name


@dataclass(frozen=True)
class BackupRecord:
    original: Path
    backup: Path


@dataclass
class TransactionLog:
    """Everything the current run changed in the target, in order."""

    records: list[BackupRecord] = field(default_factory=list)
    created: list[Path] = field(default_factory=list)

    def record_backup(self, original: Path, backup: Path) -> BackupRecord:
        record = BackupRecord(original=original, backup=backup)
        self.records.append(record)
        return record

    def discard(self, record: BackupRecord) -> None:
        self.records.remove(record)

    def record_created(self, path: Path) -> None:
        self.created.append(path)

    def backup_for(self, original: Path) -> BackupRecord | None:
        for record in self.records:
            if record.original == original:
                return record
        return None

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records and not self.created


@dataclass
class RollbackSummary:
    restored: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class ContentCounts:
    skills: int = 0
    agents: int = 0
    commands: int = 0
    settings_valid: bool | None = None
    dependencies_installed: bool = False


@dataclass
class InstallReport:
    target: Path
    reference: str
    installed: list[str] = field(default_factory=list)
    backups: list[BackupRecord] = field(default_factory=list)
    counts: ContentCounts = field(default_factory=ContentCounts)
    warnings: list[InstallerWarning] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "target": str(self.target),
            "reference": self.reference,
            "installed": list(self.installed),
            "backups": [
                {"original": str(r.original), "backup": str(r.backup)} for r in self.backups
            ],
            "counts": {
                "skills": self.counts.skills,
                "agents": self.counts.agents,
                "commands": self.counts.commands,
                "settingsValid": self.counts.settings_valid,
                "dependenciesInstalled": self.counts.dependencies_installed,
            },
            "warnings": [
                {"kind": w.kind, "message": w.message, "hint": w.hint} for w in self.warnings
            ],
        }


@dataclass(frozen=True)
class InstallOutcome:
    """Result of one transactional run: a report, or the error plus its rollback."""

    report: InstallReport | None = None
    error: InstallerError | None = None
    rollback: RollbackSummary | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None
