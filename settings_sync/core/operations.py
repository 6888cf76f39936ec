"""Push, pull and account operations exposed to hosts and the CLI."""

import logging
from pathlib import Path
from typing import Any

from ..models.blob import IDENTITY_FILENAME, RemoteBlob
from ..models.config import ConfigStore, SyncConfig
from .auth import GistAuth
from .client import GistClient
from .discovery import BlobDiscovery
from .errors import ConfigurationError
from .filesystem import LocalFileSystem
from .pull import PullOrchestrator, PullResult
from .push import PushOrchestrator, PushResult
from .store import RemoteStore


class SyncOperations:
    """Entry point tying configuration, remote store and local files together."""

    def __init__(
        self,
        config: SyncConfig,
        config_store: ConfigStore | None = None,
        store: RemoteStore | None = None,
        fs: LocalFileSystem | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize sync operations.

        Args:
            config: Sync configuration
            config_store: Where updated ids and selections are persisted
            store: RemoteStore (created from config if not provided)
            fs: Local filesystem access
            logger: Logger passed on to every component
        """
        self.config = config
        self.config_store = config_store
        self._store = store
        self.fs = fs or LocalFileSystem()
        self.logger = logger or logging.getLogger(__name__)

    def _build_auth(self, token: str | None = None) -> GistAuth:
        github = self.config.github
        return GistAuth(
            token=token or github.token,
            username=github.username,
            base_url=github.api_base_url,
            user_agent=github.user_agent,
        )

    @property
    def store(self) -> RemoteStore:
        """Get or create the RemoteStore."""
        if self._store is None:
            client = GistClient(
                auth=self._build_auth(),
                timeout=self.config.settings.timeout,
                logger=self.logger,
            )
            self._store = RemoteStore(client, logger=self.logger)
        return self._store

    def _resolve_root(self, local_root: Path | None) -> Path:
        if local_root is not None:
            return Path(local_root).expanduser()
        if not self.config.settings_path:
            raise ConfigurationError("No settings path configured. Set `settings_path` in the config file.")
        return self.config.local_root

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    def push(self, selection: list[str] | None = None, local_root: Path | None = None) -> PushResult:
        """Push the selection (defaults to the configured one)."""
        orchestrator = PushOrchestrator(
            self.config,
            self.store,
            config_store=self.config_store,
            fs=self.fs,
            logger=self.logger,
        )
        if selection is None:
            selection = list(self.config.selection)
        return orchestrator.push(selection, self._resolve_root(local_root))

    def pull(
        self,
        selection: list[str] | None = None,
        local_root: Path | None = None,
        adopt_remote_selection: bool = False,
    ) -> PullResult:
        """Pull the selection (defaults to the configured one)."""
        orchestrator = PullOrchestrator(
            self.config,
            self.store,
            config_store=self.config_store,
            fs=self.fs,
            logger=self.logger,
        )
        if selection is None:
            selection = list(self.config.selection)
        return orchestrator.pull(
            selection,
            self._resolve_root(local_root),
            adopt_remote_selection=adopt_remote_selection,
        )

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    def test_credential(self, account: str, token: str | None = None) -> str:
        """Check a token against the API and return its owner's login.

        A login differing from ``account`` only produces a warning.

        Args:
            account: Expected GitHub account, may be empty
            token: Token to check (defaults to the configured one)
        """
        token = token or self._build_auth().resolve_token()
        login = self.store.whoami(token=token)
        if account and login != account:
            self.logger.warning("Token belongs to %s, not %s", login, account)
        else:
            self.logger.info("Token belongs to %s", login)
        return login

    def discover(self, save: bool = False) -> str | None:
        """Search the account for the owned gist.

        Args:
            save: Persist the found id in the configuration
        """
        discovery = BlobDiscovery(self.store, logger=self.logger)
        blob_id = discovery.find_owned(self.config.extension_name, self.config.github.username or None)
        if blob_id and save:
            self.config.github.gist_id = blob_id
            if self.config_store is not None:
                self.config_store.save(self.config)
        return blob_id

    def list_blobs(self) -> list[tuple[RemoteBlob, bool]]:
        """List every visible gist with a flag for carrying an identity file."""
        return [(blob, blob.has_file(IDENTITY_FILENAME)) for blob in self.store.list_owned()]

    def status(self) -> dict[str, Any]:
        """Summarize the local state without touching the network."""
        backup_root = None
        if self.config.settings_path:
            backup_root = self.config.local_root / self.config.settings.backup_dir_name

        return {
            "identity": self.config.extension_name,
            "local_root": str(self.config.local_root) if self.config.settings_path else None,
            "selection": list(self.config.selection),
            "gist_id": self.config.github.gist_id,
            "backup_root": str(backup_root) if backup_root else None,
            "has_token": self._build_auth().verify_credentials(),
        }
