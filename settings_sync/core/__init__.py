"""Core sync functionality."""

from .auth import GistAuth
from .backup import BackupManager
from .client import GistClient
from .discovery import BlobDiscovery
from .errors import (
    ConfigurationError,
    EmptySelection,
    FileTooLarge,
    IdentityMismatch,
    InvalidManifest,
    MissingRemoteId,
    NoMatchingSelection,
    NotFound,
    PathConflict,
    RemoteError,
    SyncError,
    Unauthenticated,
)
from .filesystem import LocalFileSystem
from .operations import SyncOperations
from .pull import PullOrchestrator, PullResult
from .push import PushOrchestrator, PushResult
from .store import RemoteStore

__all__ = [
    "BackupManager",
    "BlobDiscovery",
    "ConfigurationError",
    "EmptySelection",
    "FileTooLarge",
    "GistAuth",
    "GistClient",
    "IdentityMismatch",
    "InvalidManifest",
    "LocalFileSystem",
    "MissingRemoteId",
    "NoMatchingSelection",
    "NotFound",
    "PathConflict",
    "PullOrchestrator",
    "PullResult",
    "PushOrchestrator",
    "PushResult",
    "RemoteError",
    "RemoteStore",
    "SyncError",
    "SyncOperations",
    "Unauthenticated",
]
