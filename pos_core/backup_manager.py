"""Utilities for managing backup copies of the SQLite shop database.

A backup is a whole-file copy of the database file placed in the backup
directory.  Restoring copies a backup over the live file after the engine
has released its connections.  Stores that are not backed by a SQLite file
(PostgreSQL, in-memory SQLite) raise :class:`BackupError`.
"""
from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .data_repository import Database
from .errors import PosError

LOGGER = logging.getLogger(__name__)

SQLITE_HEADER = b"SQLite format 3\x00"
_BACKUP_PREFIX = "shop_backup_"
_BACKUP_SUFFIX = ".db"


class BackupError(PosError):
    """Raised when a backup operation cannot be completed."""


@dataclass(frozen=True, slots=True)
class BackupMetadata:
    """Simple container describing a backup file present on disk."""

    name: str
    path: Path
    size_bytes: int
    created_at: datetime

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


def get_backup_directory(
    directory: str | os.PathLike[str] | None = None,
    *,
    create: bool = True,
) -> Path:
    """Return the backup folder: ``directory``, else ``BACKUP_DIR``, else ``./backups``."""

    path = Path(directory) if directory is not None else Path(os.getenv("BACKUP_DIR") or "backups")
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def _database_file(db: Database) -> Path:
    path = db.sqlite_path
    if path is None:
        raise BackupError(
            f"Backups are only available for file-based SQLite stores (current store: {db.engine.dialect.name})."
        )
    return path


def _build_backup_name(label: Optional[str], backup_dir: Path) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    cleaned = re.sub(r"[^0-9A-Za-z_-]+", "-", label or "").strip("-_").lower()
    stem = f"{_BACKUP_PREFIX}{timestamp}_{cleaned}" if cleaned else f"{_BACKUP_PREFIX}{timestamp}"

    name = f"{stem}{_BACKUP_SUFFIX}"
    counter = 1
    while (backup_dir / name).exists():  # two backups within the same second
        name = f"{stem}_{counter}{_BACKUP_SUFFIX}"
        counter += 1
    return name


def _metadata_for(path: Path) -> BackupMetadata:
    stat = path.stat()
    return BackupMetadata(
        name=path.name,
        path=path,
        size_bytes=stat.st_size,
        created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def list_backups(directory: str | os.PathLike[str] | None = None) -> List[BackupMetadata]:
    """Return backup metadata sorted from newest to oldest."""

    backup_dir = get_backup_directory(directory, create=False)
    if not backup_dir.exists():
        return []

    entries = [
        _metadata_for(item)
        for item in backup_dir.iterdir()
        if item.is_file() and item.name.startswith(_BACKUP_PREFIX) and item.name.endswith(_BACKUP_SUFFIX)
    ]
    entries.sort(key=lambda meta: (meta.created_at, meta.name), reverse=True)
    return entries


def check_backup_integrity(metadata: BackupMetadata) -> Tuple[bool, str]:
    """Lightweight check: the file exists, is not empty and starts with the SQLite header."""

    path = metadata.path
    if not path.exists():
        return False, "File not found"
    if path.stat().st_size <= 0:
        return False, "Empty file"

    with path.open("rb") as handle:
        header = handle.read(len(SQLITE_HEADER))
    if header != SQLITE_HEADER:
        return False, "Not a SQLite database"
    return True, "OK"


def integrity_report(backups: Iterable[BackupMetadata]) -> List[dict]:
    report: List[dict] = []
    for backup in backups:
        ok, message = check_backup_integrity(backup)
        report.append(
            {
                "name": backup.name,
                "created_at": backup.created_at,
                "ok": ok,
                "details": message,
            }
        )
    return report


def _resolve_backup_path(filename: str, directory: str | os.PathLike[str] | None = None) -> Path:
    backup_dir = get_backup_directory(directory, create=False)
    if Path(filename).name != filename:
        raise BackupError(f"Invalid backup name '{filename}'.")
    path = backup_dir / filename
    if not path.exists():
        raise BackupError(f"Backup file '{filename}' not found.")
    if not path.is_file():
        raise BackupError(f"'{filename}' is not a backup file.")
    return path


def create_backup(
    db: Database,
    *,
    label: Optional[str] = None,
    backup_dir: str | os.PathLike[str] | None = None,
) -> BackupMetadata:
    """Copy the database file into the backup folder and return its metadata."""

    source = _database_file(db)
    if not source.exists():
        raise BackupError(f"Database file '{source}' does not exist yet.")

    backup_directory = get_backup_directory(backup_dir, create=True)
    target = backup_directory / _build_backup_name(label, backup_directory)

    # BEGIN IMMEDIATE keeps writers out while the file is copied.
    with db.transaction():
        try:
            shutil.copy2(source, target)
        except OSError as exc:
            raise BackupError(f"Backup of '{source}' failed: {exc}") from exc

    LOGGER.info("Backup %s created from %s", target.name, source)
    return _metadata_for(target)


def restore_backup(
    db: Database,
    filename: str,
    *,
    backup_dir: str | os.PathLike[str] | None = None,
) -> None:
    """Replace the database file with the given backup."""

    target = _database_file(db)
    path = _resolve_backup_path(filename, directory=backup_dir)
    ok, message = check_backup_integrity(_metadata_for(path))
    if not ok:
        raise BackupError(f"Backup '{filename}' failed the integrity check: {message}.")

    db.dispose()
    try:
        shutil.copyfile(path, target)
    except OSError as exc:
        raise BackupError(f"Restore of '{filename}' failed: {exc}") from exc
    LOGGER.warning("Database %s restored from backup %s", target, filename)


def delete_backup(
    filename: str,
    *,
    backup_dir: str | os.PathLike[str] | None = None,
) -> None:
    path = _resolve_backup_path(filename, directory=backup_dir)
    path.unlink()
    LOGGER.info("Backup %s deleted", filename)


__all__ = [
    "BackupError",
    "BackupMetadata",
    "check_backup_integrity",
    "create_backup",
    "delete_backup",
    "get_backup_directory",
    "integrity_report",
    "list_backups",
    "restore_backup",
]
