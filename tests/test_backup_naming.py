from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from autopilot_installer.domain.backup_naming import (
    backup_path_for,
    choose_backup_suffix,
    list_backups,
    split_backup_name,
)

NOW = datetime(2025, 6, 7, 8, 9, 10)
NAMES = [".claude", "dev", "LICENSE"]


@pytest.mark.installer
def test_suffix_is_the_timestamp_when_nothing_collides(tmp_path: Path):
    assert choose_backup_suffix(tmp_path, NAMES, NOW, exists=Path.exists) == "20250607-080910"


@pytest.mark.installer
def test_suffix_probes_past_existing_backups_of_any_entry(tmp_path: Path):
    (tmp_path / "dev.backup.20250607-080910").mkdir()
    assert choose_backup_suffix(tmp_path, NAMES, NOW, exists=Path.exists) == "20250607-080910-1"

    (tmp_path / "LICENSE.backup.20250607-080910-1").write_text("x", encoding="utf-8")
    assert choose_backup_suffix(tmp_path, NAMES, NOW, exists=Path.exists) == "20250607-080910-2"


@pytest.mark.installer
def test_backup_path_sits_next_to_the_original(tmp_path: Path):
    assert backup_path_for(tmp_path / ".claude", "20250607-080910") == tmp_path / ".claude.backup.20250607-080910"


@pytest.mark.installer
@pytest.mark.parametrize(
    "name, expected",
    [
        (".claude.backup.20250607-080910", (".claude", "20250607-080910")),
        ("AUTOPILOT-README.md.backup.20250607-080910-3", ("AUTOPILOT-README.md", "20250607-080910-3")),
        ("notes.backup.txt", None),
        (".claude", None),
        (".backup.20250607-080910", None),
    ],
)
def test_split_backup_name(name: str, expected):
    assert split_backup_name(name) == expected


@pytest.mark.installer
def test_list_backups_reads_the_naming_ledger_in_order(tmp_path: Path):
    for name in (
        "dev.backup.20250607-080910-1",
        ".claude.backup.20250607-080910",
        "dev.backup.20250607-080910",
        "other.backup.20250607-080910",
        "notes.backup.txt",
    ):
        (tmp_path / name).mkdir()

    records = list_backups(tmp_path, NAMES, sorted(p.name for p in tmp_path.iterdir()))

    assert [r.backup.name for r in records] == [
        ".claude.backup.20250607-080910",
        "dev.backup.20250607-080910",
        "dev.backup.20250607-080910-1",
    ]
    assert records[0].original == tmp_path / ".claude"
    assert list_backups(tmp_path, NAMES, []) == []


@pytest.mark.installer
def test_suffix_uses_only_the_injected_existence_check(tmp_path: Path):
    taken = {tmp_path / ".claude.backup.20250607-080910", tmp_path / "dev.backup.20250607-080910-1"}

    assert choose_backup_suffix(tmp_path, NAMES, NOW, exists=taken.__contains__) == "20250607-080910-2"
