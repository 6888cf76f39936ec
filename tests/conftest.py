"""Shared fixtures for sync tests."""

import copy
import json
from pathlib import Path
from typing import Any, Callable

import pytest

from settings_sync.core.errors import NotFound
from settings_sync.models.blob import IDENTITY_FILENAME, MANIFEST_FILENAME, RemoteBlob, SyncManifest
from settings_sync.models.config import ConfigStore, GitHubConfig, SyncConfig


class FakeStore:
    """In-memory stand-in for RemoteStore.

    Listings omit file contents like the real gist API does, so callers
    have to hydrate blobs before reading them.
    """

    def __init__(self, login: str = "octocat") -> None:
        self.blobs: dict[str, RemoteBlob] = {}
        self.login = login
        self.calls: list[tuple[str, str]] = []
        self.removed: list[str] = []
        self._counter = 0

    def _new_id(self) -> str:
        self._counter += 1
        return f"gist{self._counter}"

    def add(self, files: dict[str, str], description: str = "", blob_id: str | None = None) -> RemoteBlob:
        blob_id = blob_id or self._new_id()
        self.blobs[blob_id] = RemoteBlob(
            id=blob_id,
            description=description,
            html_url=f"https://gist.github.com/{blob_id}",
            files=dict(files),
        )
        return copy.deepcopy(self.blobs[blob_id])

    def create(self, description: str, public: bool, files: dict[str, str]) -> RemoteBlob:
        self.calls.append(("create", ""))
        blob = self.add(files, description=description)
        self.blobs[blob.id].public = public
        return copy.deepcopy(self.blobs[blob.id])

    def fetch(self, blob_id: str) -> RemoteBlob:
        self.calls.append(("fetch", blob_id))
        if blob_id not in self.blobs:
            raise NotFound(f"Gist {blob_id} not found", 404)
        return copy.deepcopy(self.blobs[blob_id])

    def replace(
        self,
        blob_id: str,
        files: dict[str, str],
        description: str | None = None,
        remove: list[str] | None = None,
    ) -> RemoteBlob:
        self.calls.append(("replace", blob_id))
        if blob_id not in self.blobs:
            raise NotFound(f"Gist {blob_id} not found", 404)
        self.removed = list(remove or [])
        blob = self.blobs[blob_id]
        # Patch semantics: unnamed entries stay, removed entries go
        blob.files.update(files)
        for name in remove or []:
            if name not in files:
                blob.files.pop(name, None)
        if description is not None:
            blob.description = description
        return copy.deepcopy(blob)

    def delete(self, blob_id: str) -> None:
        self.calls.append(("delete", blob_id))
        if blob_id not in self.blobs:
            raise NotFound(f"Gist {blob_id} not found", 404)
        del self.blobs[blob_id]

    def list_owned(self) -> list[RemoteBlob]:
        self.calls.append(("list", ""))
        return [
            RemoteBlob(
                id=blob.id,
                description=blob.description,
                html_url=blob.html_url,
                files={name: None for name in blob.files},
            )
            for blob in self.blobs.values()
        ]

    def hydrate(self, blob: RemoteBlob) -> RemoteBlob:
        if blob.is_complete:
            return blob
        return self.fetch(blob.id)

    def whoami(self, token: str | None = None) -> str:
        self.calls.append(("whoami", token or ""))
        return self.login


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def local_root(tmp_path: Path) -> Path:
    root = tmp_path / "User"
    root.mkdir()
    return root


@pytest.fixture
def config(local_root: Path) -> SyncConfig:
    return SyncConfig(
        extension_name="cursor-settings-sync",
        settings_path=str(local_root),
        selection=["settings.json"],
        github=GitHubConfig(username="octocat"),
    )


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "config" / "config.yaml")


@pytest.fixture
def identity_file() -> Callable[..., str]:
    """Build identity file content for an identity and account."""

    def build(identity: str = "cursor-settings-sync", username: str = "octocat") -> str:
        return json.dumps({"extensionName": identity, "github": {"username": username}}, indent=2)

    return build


@pytest.fixture
def owned_files(identity_file: Callable[..., str]) -> Callable[..., dict[str, Any]]:
    """Build the reserved entries of a gist owned by an identity."""

    def build(identity: str = "cursor-settings-sync", selection: list[str] | None = None) -> dict[str, Any]:
        manifest = SyncManifest.create(identity, files=[], selection=selection or [])
        return {
            IDENTITY_FILENAME: identity_file(identity),
            MANIFEST_FILENAME: manifest.to_json(),
        }

    return build
