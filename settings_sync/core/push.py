"""Push of local files to the owned gist."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..models.blob import (
    IDENTITY_FILENAME,
    MANIFEST_FILENAME,
    DirectoryManifest,
    RemoteBlob,
    SyncManifest,
    is_reserved,
)
from ..models.config import ConfigStore, SyncConfig
from .classifier import classify, decode_manifest, decode_member, encode_directory, is_safe_relative_path
from .discovery import BlobDiscovery
from .errors import EmptySelection, InvalidManifest, NotFound, RemoteError
from .filesystem import LocalFileSystem
from .merge import in_directory, merge
from .store import RemoteStore


@dataclass
class PushResult:
    """Result of a push operation."""

    blob_id: str
    file_count: int
    created: bool = False
    html_url: str = ""
    removed_duplicates: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class PushOrchestrator:
    """Pushes the selected local files into the owned gist.

    Flow: classify local files, reuse the cached gist id or discover one,
    then either fetch + merge + replace the existing gist or create a new
    one, persist the id and delete duplicate gists.
    """

    def __init__(
        self,
        config: SyncConfig,
        store: RemoteStore,
        config_store: ConfigStore | None = None,
        discovery: BlobDiscovery | None = None,
        fs: LocalFileSystem | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.config_store = config_store
        self.logger = logger or logging.getLogger(__name__)
        self.discovery = discovery or BlobDiscovery(store, logger=self.logger)
        self.fs = fs or LocalFileSystem()

    @property
    def identity(self) -> str:
        return self.config.extension_name

    @property
    def description(self) -> str:
        return f"{self.config.github.gist_description} - {self.identity}"

    # -------------------------------------------------------------------------
    # Local files
    # -------------------------------------------------------------------------

    def collect_local_files(
        self, selection: list[str], local_root: Path
    ) -> tuple[dict[str, str], list[str], list[str]]:
        """Read and classify every selected file or directory.

        Directories become a directory manifest plus one base64 entry per
        member. Missing and invalid entries are skipped.

        Returns:
            Tuple of (gist entries to push, skipped selection entries,
            encoded directories)
        """
        files: dict[str, str] = {}
        skipped: list[str] = []
        directories: list[str] = []

        for name in selection:
            path = Path(local_root) / name

            if is_reserved(name) or not is_safe_relative_path(name):
                self.logger.warning("Skipping unsupported selection entry: %s", name)
                skipped.append(name)
                continue

            if not self.fs.exists(path):
                self.logger.warning("File not found: %s", path)
                skipped.append(name)
                continue

            if self.fs.is_dir(path):
                members = {rel: self.fs.read_bytes(path / rel) for rel in self.fs.walk_files(path)}
                if not members:
                    self.logger.warning("Skipping empty directory: %s", path)
                    skipped.append(name)
                    continue
                files.update(encode_directory(name, members))
                directories.append(name)
                self.logger.info("Encoded directory %s (%d files)", name, len(members))
                continue

            processed = classify(name, self.fs.read_bytes(path))
            if not processed.valid:
                self.logger.warning("Skipping invalid file: %s (%s)", name, processed.category)
                skipped.append(name)
                continue

            files[name] = processed.content
            self.logger.info("Processed %s (%s)", name, processed.category)

        return files, skipped, directories

    @staticmethod
    def _same_member(
        sibling: str,
        size: int | None,
        remote_files: dict[str, str],
        local_files: dict[str, str],
    ) -> bool:
        remote_member = remote_files.get(sibling)
        if remote_member is None:
            return False
        try:
            remote_bytes = decode_member(sibling, remote_member)
        except InvalidManifest:
            return False
        local_bytes = decode_member(sibling, local_files[sibling])
        return remote_bytes == local_bytes and size in (None, len(local_bytes))

    def keep_unchanged_directories(
        self,
        remote_files: dict[str, str],
        local_files: dict[str, str],
        directories: list[str],
    ) -> dict[str, str]:
        """Reuse the remote text of directories whose content did not change.

        A directory is unchanged when the remote manifest lists the same
        members and every remote member decodes to the local bytes. Its
        manifest and member entries are then pushed exactly as they are
        stored remotely, whatever format wrote them.

        Returns:
            New mapping of local entries (``local_files`` is not modified)
        """
        result = dict(local_files)
        for directory in directories:
            entry_name = DirectoryManifest(directory_name=directory).entry_name
            remote_text = remote_files.get(entry_name)
            if remote_text is None or remote_text == local_files[entry_name]:
                continue

            try:
                remote_manifest = decode_manifest(entry_name, remote_text)
                local_manifest = decode_manifest(entry_name, local_files[entry_name])
            except InvalidManifest:
                continue
            if remote_manifest.embeds_data or remote_manifest.directory_name != directory:
                continue
            if set(remote_manifest.members) != set(local_manifest.members):
                continue

            siblings = {
                remote_manifest.sibling_name(name): member.size
                for name, member in remote_manifest.members.items()
            }
            if not all(
                self._same_member(sibling, size, remote_files, local_files)
                for sibling, size in siblings.items()
            ):
                continue

            result[entry_name] = remote_text
            for sibling in siblings:
                result[sibling] = remote_files[sibling]
            self.logger.info("Directory %s unchanged, keeping its remote entries", directory)
        return result

    def _with_reserved(
        self,
        files: dict[str, str],
        selection: list[str],
        untouched: list[str] | None = None,
    ) -> dict[str, str]:
        """Add freshly generated identity and manifest entries.

        Args:
            files: Entries to upload
            selection: Selection recorded in the manifest
            untouched: Remote entries left as they are, still listed in the
                manifest
        """
        listed = {name for name in files if not is_reserved(name)}
        listed.update(name for name in untouched or [] if not is_reserved(name))
        manifest = SyncManifest.create(
            identity=self.identity,
            files=sorted(listed),
            selection=list(selection),
        )
        return {
            IDENTITY_FILENAME: json.dumps(self.config.identity_payload(), indent=2),
            MANIFEST_FILENAME: manifest.to_json(),
            **files,
        }

    # -------------------------------------------------------------------------
    # Remote operations
    # -------------------------------------------------------------------------

    def _update_existing(
        self,
        blob_id: str,
        local_files: dict[str, str],
        selection: list[str],
        directories: list[str] | None = None,
    ) -> RemoteBlob:
        """Fetch, merge and replace an existing gist.

        Remote entries whose content could not be read are left untouched.
        Only member entries of directories pushed from local that are no
        longer part of them are deleted.

        Raises:
            NotFound: If the gist was deleted out-of-band
        """
        directories = directories or []
        remote = self.store.fetch(blob_id)
        remote_files = {name: content for name, content in remote.files.items() if content is not None}

        local_files = self.keep_unchanged_directories(remote_files, local_files, directories)
        merged = merge(remote_files, local_files, directories)
        self.logger.info(
            "Merged %d remote and %d local files into %d",
            len(remote_files), len(local_files), len(merged),
        )

        stale = [
            name for name in remote.files
            if name not in merged and not is_reserved(name) and in_directory(name, directories)
        ]
        untouched = [
            name for name, content in remote.files.items()
            if content is None and not is_reserved(name) and name not in merged and name not in stale
        ]
        for name in untouched:
            self.logger.warning("Content of %s unavailable, leaving it untouched", name)
        for name in stale:
            self.logger.info("Removing %s, no longer part of its directory", name)

        return self.store.replace(
            blob_id,
            self._with_reserved(merged, selection, untouched=untouched),
            description=self.description,
            remove=stale,
        )

    def _create_new(self, local_files: dict[str, str], selection: list[str]) -> RemoteBlob:
        blob = self.store.create(
            description=self.description,
            public=self.config.github.gist_public,
            files=self._with_reserved(local_files, selection),
        )
        self.logger.info("Created gist %s", blob.id)
        return blob

    def _save_blob_id(self, blob_id: str | None) -> None:
        self.config.github.gist_id = blob_id
        if self.config_store is not None:
            self.config_store.save(self.config)

    def cleanup_duplicates(self, keep_id: str) -> list[str]:
        """Delete every other gist owned by this identity.

        The push itself already succeeded at this point, so remote failures
        are logged and the remaining duplicates are still processed; the
        next push retries whatever is left.

        Returns:
            Ids of deleted gists
        """
        try:
            duplicates = self.discovery.find_duplicates(self.identity, keep_id)
        except RemoteError as e:
            self.logger.warning("Could not list gists for cleanup: %s", e)
            return []

        removed: list[str] = []
        for blob_id in duplicates:
            try:
                self.store.delete(blob_id)
            except RemoteError as e:
                self.logger.warning("Failed to delete duplicate gist %s: %s", blob_id, e)
                continue
            self.logger.info("Deleted duplicate gist %s", blob_id)
            removed.append(blob_id)
        return removed

    # -------------------------------------------------------------------------
    # Push
    # -------------------------------------------------------------------------

    def push(self, selection: list[str], local_root: Path) -> PushResult:
        """Push the selected files.

        Args:
            selection: Names relative to ``local_root``
            local_root: Local settings directory

        Returns:
            PushResult

        Raises:
            EmptySelection: If nothing is selected
            Unauthenticated, RemoteError, FileTooLarge: From the store
        """
        if not selection:
            raise EmptySelection("No files selected for push.")

        local_files, skipped, directories = self.collect_local_files(selection, local_root)
        if not local_files:
            self.logger.warning("No valid local files to push, only refreshing the manifest")

        blob_id = self.config.github.gist_id
        if blob_id:
            self.logger.info("Using stored gist id %s", blob_id)
        else:
            blob_id = self.discovery.find_owned(self.identity, self.config.github.username or None)

        blob: RemoteBlob | None = None
        if blob_id:
            try:
                blob = self._update_existing(blob_id, local_files, selection, directories)
            except NotFound:
                self.logger.warning("Gist %s no longer exists, creating a new one", blob_id)
                self._save_blob_id(None)

        created = blob is None
        if blob is None:
            blob = self._create_new(local_files, selection)

        self._save_blob_id(blob.id)
        removed = self.cleanup_duplicates(blob.id)

        transmitted = [name for name in blob.files if not is_reserved(name)]
        return PushResult(
            blob_id=blob.id,
            file_count=len(transmitted),
            created=created,
            html_url=blob.html_url,
            removed_duplicates=removed,
            skipped=skipped,
        )
