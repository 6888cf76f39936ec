"""Pull of remote files into the local settings directory."""

import json
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ..models.blob import (
    IDENTITY_FILENAME,
    MANIFEST_FILENAME,
    DirectoryManifest,
    FileCategory,
    RemoteBlob,
    SyncManifest,
    is_reserved,
)
from ..models.config import ConfigStore, SyncConfig
from .backup import BackupManager
from .classifier import classify, decode_manifest, decode_member, is_safe_relative_path
from .errors import (
    EmptySelection,
    IdentityMismatch,
    InvalidManifest,
    MissingRemoteId,
    NoMatchingSelection,
    PathConflict,
)
from .filesystem import LocalFileSystem
from .merge import in_directory
from .store import RemoteStore


@dataclass
class PullResult:
    """Result of a pull operation."""

    restored_files: list[str] = field(default_factory=list)
    backed_up: list[str] = field(default_factory=list)
    backup_root: Path | None = None
    selection: list[str] = field(default_factory=list)


@dataclass
class PlannedWrite:
    """A single local write derived from a gist entry.

    ``data`` is None for directory creation, bytes for decoded directory
    members and text for plain files.
    """

    path: str
    source: str
    data: str | bytes | None = None

    @property
    def is_directory(self) -> bool:
        return self.data is None


def in_scope(name: str, selection: list[str]) -> bool:
    """Check if a gist entry belongs to a selection.

    An entry matches a selection entry if it is the same name, lies below
    it, or is its directory manifest (``<entry>.json``).
    """
    if is_reserved(name):
        return False
    return any(
        name == entry or name.startswith(entry + "/") or name == entry + ".json"
        for entry in selection
    )


class PullOrchestrator:
    """Restores selected gist entries into the local root."""

    def __init__(
        self,
        config: SyncConfig,
        store: RemoteStore,
        config_store: ConfigStore | None = None,
        backup: BackupManager | None = None,
        fs: LocalFileSystem | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.config_store = config_store
        self.logger = logger or logging.getLogger(__name__)
        self.fs = fs or LocalFileSystem()
        self.backup = backup or BackupManager(
            fs=self.fs,
            backup_dir_name=config.settings.backup_dir_name,
            logger=self.logger,
        )

    @property
    def identity(self) -> str:
        return self.config.extension_name

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify_identity(self, blob: RemoteBlob) -> SyncManifest | None:
        """Check the gist belongs to this identity.

        The manifest is authoritative when present. Without one, the
        identity file is checked instead; with neither, verification is
        skipped.

        Returns:
            Parsed manifest, or None if the gist has none

        Raises:
            IdentityMismatch: On a foreign or unreadable identity
        """
        content = blob.content_of(MANIFEST_FILENAME)
        if content and content.strip():
            try:
                data = json.loads(content)
            except ValueError as e:
                raise IdentityMismatch(f"Invalid {MANIFEST_FILENAME} format: {e}") from e
            if not isinstance(data, dict):
                raise IdentityMismatch(f"Invalid {MANIFEST_FILENAME} format: not a JSON object")

            manifest = SyncManifest.from_dict(data)
            if manifest.identity != self.identity:
                raise IdentityMismatch(
                    f"Gist {blob.id} belongs to {manifest.identity!r}, not {self.identity!r}"
                )
            return manifest

        content = blob.content_of(IDENTITY_FILENAME)
        if content and content.strip():
            try:
                record = json.loads(content)
            except ValueError as e:
                raise IdentityMismatch(f"Invalid {IDENTITY_FILENAME} format: {e}") from e
            name = record.get("extensionName") if isinstance(record, dict) else None
            if name != self.identity:
                raise IdentityMismatch(f"Gist {blob.id} belongs to {name!r}, not {self.identity!r}")
            return None

        self.logger.warning("Gist %s has no manifest or identity file, skipping verification", blob.id)
        return None

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def select_entries(self, blob: RemoteBlob, selection: list[str]) -> dict[str, str]:
        """Return the in-scope gist entries that carry content."""
        selected: dict[str, str] = {}
        for name, content in blob.files.items():
            if not in_scope(name, selection):
                continue
            if content is None:
                self.logger.warning("Skipping %s: no content returned", name)
                continue
            if not is_safe_relative_path(name):
                self.logger.warning("Skipping %s: unsafe file name", name)
                continue
            selected[name] = content
        return selected

    def plan_writes(self, entries: dict[str, str], all_files: dict[str, str | None]) -> list[PlannedWrite]:
        """Turn in-scope entries into an ordered list of local writes.

        Directories come first, then their members, then plain files.
        Sibling entries are looked up in ``all_files`` so a manifest
        selected on its own still restores its members. Entries below a
        manifested directory that its manifest does not list are skipped.

        Raises:
            InvalidManifest: On a malformed manifest or a missing sibling
        """
        directories: list[PlannedWrite] = []
        members: list[PlannedWrite] = []
        manifests: dict[str, DirectoryManifest] = {}
        claimed: set[str] = set()

        for name in sorted(entries):
            if classify(name, entries[name]).category != FileCategory.DIRECTORY_MANIFEST:
                continue
            manifest = decode_manifest(name, entries[name])
            manifests[name] = manifest
            directories.append(PlannedWrite(path=manifest.directory_name, source=name))

            for member in manifest.members.values():
                target = f"{manifest.directory_name}/{member.name}"
                if manifest.embeds_data:
                    members.append(PlannedWrite(target, name, decode_member(member.name, member.data or "")))
                    continue

                sibling = manifest.sibling_name(member.name)
                content = all_files.get(sibling)
                if content is None:
                    raise InvalidManifest(f"Missing entry {sibling} referenced by {name}")
                members.append(PlannedWrite(target, sibling, decode_member(sibling, content)))
                claimed.add(sibling)

        manifested = [manifest.directory_name for manifest in manifests.values()]
        plain: list[PlannedWrite] = []
        for name in sorted(entries):
            if name in manifests or name in claimed:
                continue
            if in_directory(name, manifested):
                self.logger.warning("Skipping %s: not listed in its directory manifest", name)
                continue

            processed = classify(name, entries[name])
            if not processed.valid:
                self.logger.warning("Skipping invalid remote file: %s (%s)", name, processed.category)
                continue
            plain.append(PlannedWrite(name, name, processed.content))

        return directories + members + plain

    def check_targets(self, plan: list[PlannedWrite], local_root: Path) -> None:
        """Make sure no planned write collides with an existing local path.

        Raises:
            PathConflict: If a file would replace a directory, or a
                directory (or a file's parent) would replace a file
        """
        conflicts: list[str] = []
        for write in plan:
            target = local_root / write.path
            if write.is_directory:
                if self.fs.exists(target) and not self.fs.is_dir(target):
                    conflicts.append(f"{write.path} is a file, expected a directory")
            elif self.fs.is_dir(target):
                conflicts.append(f"{write.path} is a directory, expected a file")

            for parent in Path(write.path).parents:
                if parent == Path("."):
                    continue
                if self.fs.exists(local_root / parent) and not self.fs.is_dir(local_root / parent):
                    conflicts.append(f"{parent.as_posix()} is a file, expected a directory")

        if conflicts:
            raise PathConflict("Cannot restore over existing paths: " + "; ".join(sorted(set(conflicts))))

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _stage(self, plan: list[PlannedWrite], staging: Path) -> None:
        for write in plan:
            target = staging / write.path
            if write.is_directory:
                self.fs.make_dirs(target)
            elif isinstance(write.data, bytes):
                self.fs.write_bytes(target, write.data)
            else:
                self.fs.write_text(target, write.data)

    def _apply(self, plan: list[PlannedWrite], staging: Path, local_root: Path) -> list[str]:
        restored: list[str] = []
        for write in plan:
            target = local_root / write.path
            if write.is_directory:
                self.fs.make_dirs(target)
                continue
            self.fs.copy(staging / write.path, target)
            self.logger.info("Restored %s", write.path)
            restored.append(write.path)
        return restored

    # -------------------------------------------------------------------------
    # Pull
    # -------------------------------------------------------------------------

    def pull(
        self,
        selection: list[str],
        local_root: Path,
        adopt_remote_selection: bool = False,
    ) -> PullResult:
        """Pull the selected entries of the owned gist.

        Args:
            selection: Names relative to ``local_root``
            local_root: Local settings directory
            adopt_remote_selection: Replace ``selection`` with the one stored
                in the remote manifest and persist it

        Raises:
            MissingRemoteId: If no gist id is known
            EmptySelection: If nothing is selected
            IdentityMismatch: If the gist belongs to another identity
            NoMatchingSelection: If no remote entry is in scope
            InvalidManifest: On a malformed directory manifest
            PathConflict: If a restored path collides with a local one
        """
        blob_id = self.config.github.gist_id
        if not blob_id:
            raise MissingRemoteId("No gist id found. Push your settings first or run discover.")
        if not selection and not adopt_remote_selection:
            raise EmptySelection("No files selected for pull.")

        local_root = Path(local_root)
        blob = self.store.fetch(blob_id)
        manifest = self.verify_identity(blob)

        if adopt_remote_selection and manifest is not None and manifest.selection:
            selection = list(manifest.selection)
            self.logger.info("Adopting remote selection: %s", ", ".join(selection))
            self.config.selection = selection
            if self.config_store is not None:
                self.config_store.save(self.config)

        if not selection:
            raise EmptySelection("No files selected for pull.")

        entries = self.select_entries(blob, selection)
        if not entries:
            raise NoMatchingSelection(
                f"None of the {len(blob.files)} remote files match the selection: {', '.join(selection)}"
            )

        plan = self.plan_writes(entries, blob.files)
        self.check_targets(plan, local_root)
        result = PullResult(selection=list(selection))

        with tempfile.TemporaryDirectory(prefix="cursor-settings-sync-") as tmp:
            staging = Path(tmp)
            self._stage(plan, staging)

            if self.config.settings.backup_before_sync:
                result.backup_root = self.backup.prepare(local_root)
                result.backed_up = self.backup.backup([w.path for w in plan if not w.is_directory])

            result.restored_files = self._apply(plan, staging, local_root)

        return result
