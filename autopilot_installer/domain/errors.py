"""Installer error and warning kinds.

Fatal kinds are exceptions: raising one aborts the transaction and the
installer rolls the target back before surfacing it. Warning kinds are plain
values collected in the install report; they never change the exit code.
"""

from __future__ import annotations

from dataclasses import dataclass


class InstallerError(Exception):
    """Base class for failures that abort an installation."""

    reason_code = "INSTALL-FAILED"
    exit_code = 1


class TargetInvalid(InstallerError):
    """Target path is not a directory, cannot be created, or is not writable."""

    reason_code = "TARGET-INVALID"
    exit_code = 2


class ConfigError(InstallerError):
    """Installer configuration file or override is missing or malformed."""

    reason_code = "CONFIG-INVALID"
    exit_code = 2


class SourceUnavailable(InstallerError):
    reason_code = "SOURCE-UNAVAILABLE"
    exit_code = 3


class SourceIncomplete(InstallerError):
    reason_code = "SOURCE-INCOMPLETE"
    exit_code = 3

    def __init__(self, message: str, missing: tuple[str, ...] = ()):
        super().__init__(message)
        self.missing = missing


class BackupFailed(InstallerError):
    reason_code = "BACKUP-FAILED"
    exit_code = 4


class CopyFailed(InstallerError):
    reason_code = "COPY-FAILED"
    exit_code = 5


class InstallCancelled(InstallerError):
    """The run was interrupted (Ctrl-C) before it completed."""

    reason_code = "INSTALL-CANCELLED"
    exit_code = 130


@dataclass(frozen=True)
class InstallerWarning:
    message: str
    hint: str | None = None

    kind = "warning"


@dataclass(frozen=True)
class DependencyWarning(InstallerWarning):
    kind = "dependency"


@dataclass(frozen=True)
class PermissionWarning(InstallerWarning):
    kind = "permission"


@dataclass(frozen=True)
class VerificationWarning(InstallerWarning):
    kind = "verification"
