"""Data models for the settings sync system."""

from .blob import (
    IDENTITY_FILENAME,
    MANIFEST_FILENAME,
    RESERVED_FILENAMES,
    DirectoryManifest,
    FileCategory,
    ManifestMember,
    ProcessedFile,
    RemoteBlob,
    SyncManifest,
    is_reserved,
)
from .config import ConfigStore, GitHubConfig, SyncConfig, SyncSettings

__all__ = [
    "IDENTITY_FILENAME",
    "MANIFEST_FILENAME",
    "RESERVED_FILENAMES",
    "ConfigStore",
    "DirectoryManifest",
    "FileCategory",
    "GitHubConfig",
    "ManifestMember",
    "ProcessedFile",
    "RemoteBlob",
    "SyncConfig",
    "SyncManifest",
    "SyncSettings",
    "is_reserved",
]
