"""Exception types raised by the sync engine."""

from typing import Any


class SyncError(Exception):
    """Base class for all sync failures.

    ``user_action_required`` marks errors the user has to fix before trying
    again; ``retryable`` marks errors where simply retrying later is reasonable.
    """

    user_action_required = False
    retryable = False


class Unauthenticated(SyncError):
    """No usable GitHub token could be resolved."""

    user_action_required = True


class RemoteError(SyncError):
    """Exception raised for non-2xx responses and transport failures."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        # Transport failures carry no status code
        return self.status_code is None or self.status_code >= 500


class NotFound(RemoteError):
    """The requested gist no longer exists."""


class FileTooLarge(SyncError):
    """A file exceeds the per-file size cap of the gist API."""

    user_action_required = True

    def __init__(self, name: str, size: int, limit: int) -> None:
        super().__init__(
            f"File {name} is too large ({size / 1024 / 1024:.2f}MB). "
            f"Maximum allowed is {limit / 1024 / 1024:.2f}MB."
        )
        self.name = name
        self.size = size
        self.limit = limit


class IdentityMismatch(SyncError):
    """The fetched gist does not belong to this application."""

    user_action_required = True


class NoMatchingSelection(SyncError):
    """None of the remote files match the current selection."""

    user_action_required = True


class InvalidManifest(SyncError):
    """A directory manifest is structurally malformed."""


class MissingRemoteId(SyncError):
    """No gist id is known locally."""

    user_action_required = True


class EmptySelection(SyncError):
    """No files are selected for synchronization."""

    user_action_required = True


class ConfigurationError(SyncError):
    """The configuration is missing a required value."""

    user_action_required = True


class PathConflict(SyncError):
    """A pulled entry collides with a local path of the other kind."""

    user_action_required = True
