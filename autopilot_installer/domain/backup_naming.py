"""Backup path naming.

Backups live next to the entry they replace as ``<name>.backup.<suffix>``.
There is no manifest: this naming convention is the only record of them.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from autopilot_installer.domain.models import BackupRecord

BACKUP_MARKER = ".backup."
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
MAX_PROBES = 1000


def timestamp_suffix(now: datetime) -> str:
    return now.strftime(TIMESTAMP_FORMAT)


def backup_path_for(original: Path, suffix: str) -> Path:
    return original.with_name(f"{original.name}{BACKUP_MARKER}{suffix}")


def choose_backup_suffix(
    target: Path,
    install_names: Iterable[str],
    now: datetime,
    *,
    exists: Callable[[Path], bool],
) -> str:
    """Pick one suffix for the whole run that collides with no existing path.

    Two runs inside the same second get ``<ts>`` and ``<ts>-1``.
    """
    names = list(install_names)
    base = timestamp_suffix(now)
    for attempt in range(MAX_PROBES):
        suffix = base if attempt == 0 else f"{base}-{attempt}"
        candidates = (backup_path_for(target / name, suffix) for name in names)
        if not any(exists(p) for p in candidates):
            return suffix
    raise RuntimeError(f"no free backup suffix for {base} after {MAX_PROBES} probes")


def split_backup_name(name: str) -> tuple[str, str] | None:
    """``'.claude.backup.20250101-120000'`` -> ``('.claude', '20250101-120000')``."""
    original, marker, suffix = name.rpartition(BACKUP_MARKER)
    if not marker or not original or not suffix:
        return None
    stamp = suffix.split("-")
    if len(stamp) < 2 or not all(part.isdigit() for part in stamp):
        return None
    return original, suffix


def list_backups(target: Path, install_names: Iterable[str], children: Iterable[str]) -> list[BackupRecord]:
    """Backups of managed entries among ``children``, the names found in ``target``."""
    names = set(install_names)
    found: list[BackupRecord] = []
    for child in children:
        parsed = split_backup_name(child)
        if parsed is None or parsed[0] not in names:
            continue
        found.append(BackupRecord(original=target / parsed[0], backup=target / child))
    return sorted(found, key=lambda r: (_suffix_key(r.backup.name), r.original.name))


def _suffix_key(name: str) -> tuple[int, ...]:
    parsed = split_backup_name(name)
    if parsed is None:
        return ()
    return tuple(int(part) for part in parsed[1].split("-"))
