"""
File-backed registry store.

The registry is a single file owned by this service. Every overwrite is
preceded by a timestamped backup and done through temp-file + rename, so the
on-disk registry is always either the previous or the new content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
import shutil

from cms.core.errors import NotFoundError, StoreError
from cms.core.utils import atomic_write_text

logger = logging.getLogger("cms.registry_store")

BACKUP_STAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"


@dataclass
class RegistryWriteResult:
    path: Path
    timestamp: str
    backup: Optional[Path]
    pruned: list[Path]


def _backup_stamp(now: datetime) -> str:
    # ISO 8601 with ':' and '.' replaced so the name is filesystem safe and sorts chronologically
    return now.astimezone(timezone.utc).strftime(BACKUP_STAMP_FORMAT)


def _parse_stamp(stamp: str) -> Optional[datetime]:
    try:
        return datetime.strptime(stamp, BACKUP_STAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


class RegistryStore:
    """Read/overwrite the registry file and rotate its backups."""

    def __init__(self, path: Path, *, backup_keep: int = 5, backup_dir: Optional[Path] = None) -> None:
        self.path = Path(path)
        self.backup_keep = max(1, int(backup_keep))
        self.backup_dir = Path(backup_dir) if backup_dir else self.path.parent

    @property
    def backup_prefix(self) -> str:
        return f"{self.path.stem}.backup."

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(f"Registry file not found: {self.path}")
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreError(f"read failed: {exc}")

    def status(self) -> dict:
        try:
            stats = self.path.stat()
        except FileNotFoundError as exc:
            raise NotFoundError(f"ENOENT: no such file or directory, stat '{exc.filename or self.path}'")
        except OSError as exc:
            raise StoreError(f"stat failed: {exc}")
        modified = datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)
        return {
            "exists": True,
            "size": stats.st_size,
            "modified": modified.isoformat().replace("+00:00", "Z"),
            "path": str(self.path),
        }

    def _stamp_of(self, backup: Path) -> str:
        return backup.name[len(self.backup_prefix):-len(self.path.suffix) or None]

    def list_backups(self) -> list[Path]:
        """Backups newest first; stamps only ever increase, so name order is creation order."""
        if not self.backup_dir.is_dir():
            return []
        found = [
            p
            for p in self.backup_dir.iterdir()
            if p.is_file() and p.name.startswith(self.backup_prefix) and p.name.endswith(self.path.suffix)
        ]
        return sorted(found, key=lambda p: p.name, reverse=True)

    def backup(self, now: Optional[datetime] = None) -> Optional[Path]:
        """Copy the current registry to a timestamped backup. None when there is nothing to back up."""
        if not self.exists():
            return None
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        now = now or datetime.now(timezone.utc)
        existing = self.list_backups()
        latest = _parse_stamp(self._stamp_of(existing[0])) if existing else None
        # never go behind the newest backup (same clock tick or a clock stepped back)
        if latest is not None and now <= latest:
            now = latest + timedelta(microseconds=1)
        target = self.backup_dir / f"{self.backup_prefix}{_backup_stamp(now)}{self.path.suffix}"
        while target.exists():
            now += timedelta(microseconds=1)
            target = self.backup_dir / f"{self.backup_prefix}{_backup_stamp(now)}{self.path.suffix}"
        try:
            shutil.copy2(self.path, target)
        except OSError as exc:
            raise StoreError(f"backup failed: {exc}")
        logger.info("Backed up registry to %s", target.name)
        return target

    def prune_backups(self) -> list[Path]:
        removed = []
        for old in self.list_backups()[self.backup_keep:]:
            try:
                old.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StoreError(f"backup prune failed: {exc}")
            removed.append(old)
        if removed:
            logger.info("Pruned %d old registry backup(s)", len(removed))
        return removed

    def write(self, content: str) -> RegistryWriteResult:
        """
        Back up, prune, then atomically replace the registry with content.

        Callers validate content first; nothing here inspects it.
        """
        now = datetime.now(timezone.utc)
        backup = self.backup(now)
        pruned = self.prune_backups()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_text(self.path, content)
        except OSError as exc:
            logger.error("Registry write failed: %s", exc)
            raise StoreError(f"write failed: {exc}")
        logger.info("Registry updated: %s", self.path)
        return RegistryWriteResult(
            path=self.path,
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            backup=backup,
            pruned=pruned,
        )
