"""Configuration model for the settings sync system."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_EXTENSION_NAME = "cursor-settings-sync"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "cursor-settings-sync" / "config.yaml"


@dataclass
class GitHubConfig:
    """GitHub account and gist settings."""

    username: str = ""
    gist_id: str | None = None  # Cached id of the owned gist
    gist_description: str = "Cursor Settings Sync Backup"
    gist_public: bool = False
    api_base_url: str = "https://api.github.com"
    user_agent: str = "Cursor-Settings-Sync-Extension"
    token: str = ""  # Optional, GITHUB_TOKEN is used when empty

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        data: dict[str, Any] = {
            "username": self.username,
            "gist_id": self.gist_id,
            "gist_description": self.gist_description,
            "gist_public": self.gist_public,
            "api_base_url": self.api_base_url,
            "user_agent": self.user_agent,
        }
        if self.token:
            data["token"] = self.token
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GitHubConfig":
        """Create from dictionary."""
        defaults = cls()
        return cls(
            username=data.get("username") or "",
            gist_id=data.get("gist_id") or None,
            gist_description=data.get("gist_description", defaults.gist_description),
            gist_public=bool(data.get("gist_public", False)),
            api_base_url=data.get("api_base_url", defaults.api_base_url),
            user_agent=data.get("user_agent", defaults.user_agent),
            token=data.get("token") or "",
        )


@dataclass
class SyncSettings:
    """Sync operation settings."""

    backup_before_sync: bool = True
    backup_dir_name: str = "backup-cursor-git-sync"
    timeout: int = 30
    verbose: bool = False


@dataclass
class SyncConfig:
    """Main configuration record.

    Holds the identity, the credential settings, the local root, the
    selection and the cached gist id. The token and the selection are local
    only and never leave this machine as part of the identity file.
    """

    extension_name: str = DEFAULT_EXTENSION_NAME
    settings_path: str = ""  # Local root the selection is relative to
    selection: list[str] = field(default_factory=list)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    settings: SyncSettings = field(default_factory=SyncSettings)

    @property
    def local_root(self) -> Path:
        """Local root with ``~`` expanded."""
        return Path(self.settings_path).expanduser()

    def identity_payload(self) -> dict[str, Any]:
        """Build the identity record stored in the gist.

        The wire shape uses the camelCase keys other clients look for
        (``extensionName``, ``github.username``). The token is cleared and
        the selection left out.
        """
        return {
            "extensionName": self.extension_name,
            "settings": {
                "path": self.settings_path,
            },
            "github": {
                "personalAccessToken": None,
                "username": self.github.username,
                "gistId": self.github.gist_id,
                "gistDescription": self.github.gist_description,
                "gistPublic": self.github.gist_public,
                "apiBaseUrl": self.github.api_base_url,
                "userAgent": self.github.user_agent,
            },
            "sync": {
                "backupBeforeSync": self.settings.backup_before_sync,
            },
        }

    @classmethod
    def load(cls, config_path: Path) -> "SyncConfig":
        """Load configuration from YAML file, or defaults if it is missing."""
        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings_data = data.get("settings") or {}
        defaults = SyncSettings()
        settings = SyncSettings(
            backup_before_sync=settings_data.get("backup_before_sync", defaults.backup_before_sync),
            backup_dir_name=settings_data.get("backup_dir_name", defaults.backup_dir_name),
            timeout=int(settings_data.get("timeout", defaults.timeout)),
            verbose=settings_data.get("verbose", defaults.verbose),
        )

        return cls(
            extension_name=data.get("extension_name") or DEFAULT_EXTENSION_NAME,
            settings_path=data.get("settings_path") or "",
            selection=list(data.get("selection") or []),
            github=GitHubConfig.from_dict(data.get("github") or {}),
            settings=settings,
        )

    def save(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data: dict[str, Any] = {
            "extension_name": self.extension_name,
            "settings_path": self.settings_path,
            "selection": list(self.selection),
            "github": self.github.to_dict(),
            "settings": {
                "backup_before_sync": self.settings.backup_before_sync,
                "backup_dir_name": self.settings.backup_dir_name,
                "timeout": self.settings.timeout,
                "verbose": self.settings.verbose,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


class ConfigStore:
    """Load/save access to the configuration file at a fixed path."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    def load(self) -> SyncConfig:
        return SyncConfig.load(self.config_path)

    def save(self, config: SyncConfig) -> None:
        config.save(self.config_path)
