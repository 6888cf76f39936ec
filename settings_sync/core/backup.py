"""Backup of local files before they are overwritten by a pull."""

import logging
from pathlib import Path

from .filesystem import LocalFileSystem

DEFAULT_BACKUP_DIR_NAME = "backup-cursor-git-sync"


class BackupManager:
    """Keeps a single backup directory inside the local root.

    Only the most recent pre-pull state of each path is retained: a stale
    backup copy of the same path is deleted before the new one is made.
    """

    def __init__(
        self,
        fs: LocalFileSystem | None = None,
        backup_dir_name: str = DEFAULT_BACKUP_DIR_NAME,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fs = fs or LocalFileSystem()
        self.backup_dir_name = backup_dir_name
        self.logger = logger or logging.getLogger(__name__)
        self.local_root: Path | None = None
        self.backup_root: Path | None = None

    def prepare(self, local_root: Path) -> Path:
        """Create the backup directory if needed and return it."""
        self.local_root = Path(local_root)
        self.backup_root = self.local_root / self.backup_dir_name
        if not self.fs.exists(self.backup_root):
            self.logger.info("Creating backup directory: %s", self.backup_root)
        self.fs.make_dirs(self.backup_root)
        return self.backup_root

    def backup(self, targets: list[str]) -> list[str]:
        """Back up every target that currently exists locally.

        Args:
            targets: Paths relative to the local root

        Returns:
            Targets that were backed up
        """
        if self.local_root is None or self.backup_root is None:
            raise RuntimeError("prepare() must be called before backup()")

        backed_up: list[str] = []
        for target in targets:
            current = self.local_root / target
            if not self.fs.exists(current) or self.fs.is_dir(current):
                continue

            backup_path = self.backup_root / target
            if self.fs.exists(backup_path):
                if self.fs.is_dir(backup_path):
                    self.fs.remove_dir(backup_path)
                else:
                    self.fs.remove_file(backup_path)
                self.logger.debug("Removed stale backup of %s", target)

            self.fs.copy(current, backup_path)
            self.logger.info("Backed up: %s", target)
            backed_up.append(target)

        return backed_up
