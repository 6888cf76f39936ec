"""Local filesystem access used by the sync engine."""

import shutil
from pathlib import Path


class LocalFileSystem:
    """Thin wrapper over pathlib and shutil.

    All sync components go through this class for disk access so that tests
    and hosts can substitute their own implementation.
    """

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def size(self, path: Path) -> int:
        return Path(path).stat().st_size

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write_text(self, path: Path, content: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps "\n" as is on every platform
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def write_bytes(self, path: Path, data: bytes) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def copy(self, source: Path, target: Path) -> None:
        """Copy a file, creating parent directories of the target."""
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)

    def make_dirs(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove_file(self, path: Path) -> None:
        Path(path).unlink()

    def remove_dir(self, path: Path) -> None:
        """Remove a directory tree."""
        shutil.rmtree(path)

    def list_dir(self, path: Path) -> list[str]:
        return sorted(child.name for child in Path(path).iterdir())

    def walk_files(self, path: Path) -> list[str]:
        """List every file below a directory as relative POSIX paths."""
        root = Path(path)
        return sorted(
            child.relative_to(root).as_posix()
            for child in root.rglob("*")
            if child.is_file()
        )
