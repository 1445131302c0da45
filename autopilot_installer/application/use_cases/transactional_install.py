"""Transactional installation of the managed template entries.

A run either leaves every managed entry replaced by the staged content (with
the previous versions kept as ``<name>.backup.<suffix>``) or puts the target
back exactly as it was found.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from autopilot_installer.application.ports.gateways import (
    ContentSource,
    Filesystem,
    NullReporter,
    ProgressReporter,
)
from autopilot_installer.domain.backup_naming import backup_path_for, choose_backup_suffix, list_backups
from autopilot_installer.domain.errors import (
    BackupFailed,
    CopyFailed,
    InstallCancelled,
    InstallerError,
    SourceIncomplete,
    TargetInvalid,
)
from autopilot_installer.domain.models import (
    BackupRecord,
    DEFAULT_ENTRIES,
    InstallOutcome,
    InstallReport,
    ManagedEntry,
    PlannedEntry,
    RollbackSummary,
    StagedContent,
    TransactionLog,
)

SCRATCH_PREFIX = "autopilot-install-"


def resolve_target(target: Path | str) -> Path:
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(target)))))


class TransactionalInstaller:
    def __init__(
        self,
        *,
        source: ContentSource,
        filesystem: Filesystem,
        entries: Sequence[ManagedEntry] = DEFAULT_ENTRIES,
        reporter: ProgressReporter | None = None,
        clock: Callable[[], datetime] = datetime.now,
        scratch_parent: Path | None = None,
    ):
        self.source = source
        self.fs = filesystem
        self.entries = tuple(entries)
        self.reporter = reporter or NullReporter()
        self._clock = clock
        self._scratch_parent = scratch_parent

    def validate(self, target: Path | str, *, create: bool = False) -> Path:
        resolved = resolve_target(target)
        if self.fs.exists(resolved):
            if not self.fs.is_dir(resolved):
                raise TargetInvalid(f"Target exists and is not a directory: {resolved}")
        elif not create:
            raise TargetInvalid(f"Target directory does not exist: {resolved}")
        else:
            try:
                self.fs.make_dirs(resolved)
            except OSError as exc:
                raise TargetInvalid(f"Cannot create target directory {resolved}: {exc}") from exc
            self.reporter.ok(f"Created directory: {resolved}")

        if not self.fs.is_writable(resolved):
            raise TargetInvalid(f"Target directory is not writable: {resolved}")
        self.reporter.ok(f"Target directory: {resolved}")
        return resolved

    def plan(self, target: Path) -> list[PlannedEntry]:
        return [PlannedEntry(entry, self.fs.exists(target / entry.install_name)) for entry in self.entries]

    def list_backups(self, target: Path) -> list[BackupRecord]:
        names = [e.install_name for e in self.entries]
        return list_backups(target, names, self.fs.list_names(target))

    def stage(self, scratch: Path) -> StagedContent:
        self.reporter.step(f"📥 Downloading template from {self.source.describe()}...")
        root = self.source.fetch(scratch)
        staged = StagedContent(root=root, reference=self.source.reference)

        missing = tuple(e.name for e in self.entries if e.required and not staged.has(e))
        if missing:
            raise SourceIncomplete(
                f"Downloaded archive appears invalid (missing {', '.join(missing)})",
                missing=missing,
            )
        self.reporter.ok("Template downloaded")
        return staged

    def backup(
        self,
        target: Path,
        log: TransactionLog | None = None,
        staged: StagedContent | None = None,
    ) -> TransactionLog:
        """Move aside every existing entry that ``staged`` will replace."""
        log = log if log is not None else TransactionLog()
        self.reporter.step("📂 Checking for existing files...")

        existing = [
            e
            for e in self.entries
            if (staged is None or staged.has(e)) and self.fs.exists(target / e.install_name)
        ]
        if not existing:
            self.reporter.info("No existing files to backup")
            return log

        suffix = choose_backup_suffix(
            target,
            [e.install_name for e in self.entries],
            self._clock(),
            exists=self.fs.exists,
        )
        for entry in existing:
            original = target / entry.install_name
            backup = backup_path_for(original, suffix)
            # logged first so an interrupt right after the rename is still undone
            record = log.record_backup(original, backup)
            try:
                self.fs.move(original, backup)
            except OSError as exc:
                log.discard(record)
                raise BackupFailed(f"Could not back up {entry.display_name}: {exc}") from exc
            self.reporter.ok(f"Backed up {entry.display_name} → {backup.name}")
        return log

    def install(self, target: Path, staged: StagedContent, log: TransactionLog) -> list[str]:
        self.reporter.step("📋 Installing files...")
        installed: list[str] = []
        for entry in self.entries:
            if not staged.has(entry):
                self.reporter.warn(f"{entry.name} not found in template (skipping)")
                continue

            dst = target / entry.install_name
            if log.backup_for(dst) is None:
                if self.fs.exists(dst):
                    raise CopyFailed(f"Refusing to overwrite {entry.display_name}: it was not backed up")
                log.record_created(dst)

            try:
                self.fs.copy(staged.path_of(entry), dst)
            except OSError as exc:
                raise CopyFailed(f"Could not copy {entry.display_name}: {exc}") from exc

            installed.append(entry.install_name)
            if entry.is_renamed:
                self.reporter.ok(f"Copied {entry.name} → {entry.install_name}")
            else:
                self.reporter.ok(f"Copied {entry.display_name}")
        return installed

    def rollback(self, target: Path, log: TransactionLog) -> RollbackSummary:
        """Undo ``log`` in reverse order. Safe to call more than once."""
        summary = RollbackSummary()

        for path in reversed(log.created):
            if not self.fs.exists(path):
                continue
            try:
                self.fs.remove(path)
            except OSError as exc:
                summary.failures.append(f"Could not remove {_relative(target, path)}: {exc}")
                self.reporter.warn(f"Could not remove {_relative(target, path)}: {exc}")
                continue
            summary.removed.append(path)
            self.reporter.ok(f"Removed {_relative(target, path)}")

        for record in reversed(log.records):
            name = _relative(target, record.original)
            if not self.fs.exists(record.backup):
                summary.skipped.append(f"Backup {record.backup.name} no longer exists; {name} left as is")
                self.reporter.warn(f"Backup {record.backup.name} not found (already restored?)")
                continue
            try:
                if self.fs.exists(record.original):
                    self.fs.remove(record.original)
                self.fs.move(record.backup, record.original)
            except OSError as exc:
                summary.failures.append(f"Could not restore {name} from {record.backup.name}: {exc}")
                self.reporter.warn(f"Could not restore {name}: {exc}")
                continue
            summary.restored.append(record.original)
            self.reporter.ok(f"Restored {name}")

        return summary

    def run(self, target: Path | str, *, create: bool = False) -> InstallOutcome:
        try:
            resolved = self.validate(target, create=create)
        except InstallerError as exc:
            self.reporter.error(f"Installation failed: {exc}")
            return InstallOutcome(error=exc)

        log = TransactionLog()
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX, dir=self._scratch_parent) as scratch:
            try:
                staged = self.stage(Path(scratch))
                self.backup(resolved, log, staged)
                installed = self.install(resolved, staged, log)
            except InstallerError as exc:
                return InstallOutcome(error=exc, rollback=self._abort(resolved, log, exc))
            except KeyboardInterrupt:
                cancelled = InstallCancelled("Interrupted by user")
                return InstallOutcome(error=cancelled, rollback=self._abort(resolved, log, cancelled))
            except Exception as exc:
                self._abort(resolved, log, exc)
                raise

        report = InstallReport(
            target=resolved,
            reference=staged.reference,
            installed=installed,
            backups=list(log.records),
        )
        return InstallOutcome(report=report)

    def _abort(self, target: Path, log: TransactionLog, exc: BaseException) -> RollbackSummary:
        self.reporter.error(f"Installation failed: {exc}")
        if log.is_empty:
            return RollbackSummary()
        self.reporter.step("🔄 Rolling back changes...")
        return self.rollback(target, log)


def _relative(target: Path, path: Path) -> str:
    try:
        return str(path.relative_to(target))
    except ValueError:
        return str(path)
