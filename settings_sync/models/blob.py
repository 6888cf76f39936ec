"""Data models for gists, sync manifests and directory manifests."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Reserved gist entries, regenerated on every push
IDENTITY_FILENAME = "cursor-git-sync-storage.json"
MANIFEST_FILENAME = "timestamp.json"
RESERVED_FILENAMES = frozenset({IDENTITY_FILENAME, MANIFEST_FILENAME})


def is_reserved(name: str) -> bool:
    """Check if a gist entry name is one of the reserved entries."""
    return name in RESERVED_FILENAMES


class FileCategory:
    """Content categories of a synced file."""

    TEXT = "text"
    JSON = "json"
    DIRECTORY_MANIFEST = "directory-manifest"


@dataclass
class ProcessedFile:
    """A classified and normalized file, ready to transmit or write."""

    content: str
    category: str
    valid: bool


@dataclass
class RemoteBlob:
    """A gist as returned by the API.

    File contents are ``None`` when the API omitted them, which is the case
    for the gist listing endpoint, and for files the API truncated. The raw
    URLs of truncated files are kept in ``truncated``.
    """

    id: str
    description: str = ""
    public: bool = False
    html_url: str = ""
    files: dict[str, str | None] = field(default_factory=dict)
    truncated: dict[str, str] = field(default_factory=dict)

    def has_file(self, name: str) -> bool:
        return name in self.files

    def content_of(self, name: str) -> str | None:
        return self.files.get(name)

    @property
    def is_complete(self) -> bool:
        """True if every file carries its content."""
        return all(content is not None for content in self.files.values())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteBlob":
        """Create from a gist API response."""
        files: dict[str, str | None] = {}
        truncated: dict[str, str] = {}
        for name, file_data in (data.get("files") or {}).items():
            if file_data is None:
                continue
            if file_data.get("truncated"):
                # Partial content must never be mistaken for the whole file
                files[name] = None
                truncated[name] = file_data.get("raw_url") or ""
                continue
            files[name] = file_data.get("content")
        return cls(
            id=str(data.get("id", "")),
            description=data.get("description") or "",
            public=bool(data.get("public", False)),
            html_url=data.get("html_url", ""),
            files=files,
            truncated=truncated,
        )


@dataclass
class SyncManifest:
    """Contents of the reserved manifest entry (``timestamp.json``)."""

    identity: str
    files: list[str] = field(default_factory=list)
    selection: list[str] | None = None
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "timestamp": self.timestamp,
            "identity": self.identity,
            # Older clients read the identity from this key
            "extensionName": self.identity,
            "files": list(self.files),
        }
        if self.selection is not None:
            data["selection"] = list(self.selection)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncManifest":
        """Create from dictionary, accepting either identity key."""
        selection = data.get("selection")
        if selection is None:
            # Written by older clients
            selection = data.get("includedDirectories")
        return cls(
            identity=data.get("identity") or data.get("extensionName") or "",
            files=list(data.get("files") or []),
            selection=list(selection) if selection is not None else None,
            timestamp=data.get("timestamp", ""),
        )

    @classmethod
    def create(cls, identity: str, files: list[str], selection: list[str]) -> "SyncManifest":
        """Create a manifest stamped with the current time."""
        return cls(
            identity=identity,
            files=files,
            selection=selection,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )


@dataclass
class ManifestMember:
    """A single member of a directory manifest."""

    name: str
    mime_type: str = "application/octet-stream"
    size: int | None = None
    data: str | None = None  # Embedded base64, legacy v1 manifests only


@dataclass
class DirectoryManifest:
    """Versioned description of a synced directory.

    Version 1.0 embeds each member as base64 inside the manifest itself and
    is only read. Versions 2.0 and 3.0 hold metadata only; each member is a
    sibling gist entry ``<directory>/<member>`` with raw base64 text.
    """

    LEGACY_VERSION = "1.0"
    SIBLING_VERSIONS = ("2.0", "3.0")
    CURRENT_VERSION = "3.0"

    directory_name: str
    version: str = CURRENT_VERSION
    members: dict[str, ManifestMember] = field(default_factory=dict)

    @property
    def embeds_data(self) -> bool:
        return self.version == self.LEGACY_VERSION

    @property
    def entry_name(self) -> str:
        """Gist entry name holding this manifest."""
        return f"{self.directory_name}.json"

    def sibling_name(self, member: str) -> str:
        """Gist entry name holding a member's base64 content."""
        return f"{self.directory_name}/{member}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (sibling form only)."""
        return {
            "version": self.version,
            "directoryName": self.directory_name,
            "images": {
                name: {"mimeType": member.mime_type, "size": member.size}
                for name, member in sorted(self.members.items())
            },
        }

    def to_json(self) -> str:
        # Stable output keeps unchanged directories byte-identical remotely
        return json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"
