"""Tests for the SyncOperations facade and the CLI."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from settings_sync.core.errors import ConfigurationError
from settings_sync.core.operations import SyncOperations
from settings_sync.main import main
from settings_sync.models.config import ConfigStore, SyncConfig


@pytest.fixture
def ops(config: SyncConfig, store, config_store: ConfigStore) -> SyncOperations:
    return SyncOperations(config, config_store=config_store, store=store)


class TestSyncOperations:
    """Tests for SyncOperations class."""

    def test_push_uses_configured_selection(self, ops, store, local_root: Path) -> None:
        (local_root / "settings.json").write_text("{}")

        result = ops.push()

        assert "settings.json" in store.blobs[result.blob_id].files

    def test_pull_uses_configured_selection(self, ops, store, config, owned_files, local_root: Path) -> None:
        store.add({**owned_files(), "settings.json": "{}", "keybindings.json": "[]"}, blob_id="mine")
        config.github.gist_id = "mine"

        result = ops.pull()

        assert result.restored_files == ["settings.json"]

    def test_missing_settings_path(self, store, config_store) -> None:
        ops = SyncOperations(SyncConfig(selection=["settings.json"]), config_store=config_store, store=store)

        with pytest.raises(ConfigurationError):
            ops.push()

    def test_explicit_local_root(self, store, config_store, tmp_path: Path) -> None:
        root = tmp_path / "elsewhere"
        root.mkdir()
        (root / "a.json").write_text("{}")
        ops = SyncOperations(SyncConfig(), config_store=config_store, store=store)

        result = ops.push(selection=["a.json"], local_root=root)

        assert "a.json" in store.blobs[result.blob_id].files

    def test_credential_matching_account(self, ops, store) -> None:
        assert ops.test_credential("octocat", "ghp_other") == "octocat"
        assert ("whoami", "ghp_other") in store.calls

    def test_credential_mismatch_is_warning(self, ops, store, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            login = ops.test_credential("someone-else", "ghp_other")

        assert login == "octocat"
        assert "not someone-else" in caplog.text

    def test_discover_and_save(self, ops, store, config_store, owned_files) -> None:
        store.add(owned_files(), blob_id="found")

        assert ops.discover(save=True) == "found"
        assert config_store.load().github.gist_id == "found"

    def test_list_blobs(self, ops, store, owned_files) -> None:
        store.add(owned_files(), blob_id="mine")
        store.add({"notes.md": "x"}, blob_id="other")

        assert [(blob.id, owned) for blob, owned in ops.list_blobs()] == [("mine", True), ("other", False)]

    def test_status(self, ops, config, local_root: Path) -> None:
        config.github.gist_id = "abc"

        with patch.dict(os.environ, {}, clear=True), patch("settings_sync.core.auth.load_dotenv"):
            status = ops.status()

        assert status["identity"] == "cursor-settings-sync"
        assert status["gist_id"] == "abc"
        assert status["selection"] == ["settings.json"]
        assert status["local_root"] == str(local_root)
        assert status["backup_root"] == str(local_root / "backup-cursor-git-sync")
        assert status["has_token"] is False

    def test_status_with_configured_token(self, ops, config) -> None:
        config.github.token = "ghp_configured"

        assert ops.status()["has_token"] is True


class TestCli:
    """Tests for the command line entry point."""

    def test_select_saves_selection(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.yaml"

        assert main(["--config", str(config_path), "select", "settings.json", "snippets"]) == 0
        assert ConfigStore(config_path).load().selection == ["settings.json", "snippets"]

    def test_status(self, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "config.yaml"), "status"]) == 0

    def test_push_without_settings_path_fails(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.yaml"
        main(["--config", str(config_path), "select", "settings.json"])

        with patch("settings_sync.core.operations.GistClient"):
            assert main(["--config", str(config_path), "push"]) == 1

    def test_no_command(self, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "config.yaml")]) == 1

    def test_config_loaded_once(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.yaml"
        main(["--config", str(config_path), "select", "settings.json"])

        with patch.object(ConfigStore, "load", autospec=True, return_value=SyncConfig(selection=["a.json"])) as load:
            assert main(["--config", str(config_path), "--verbose", "select", "b.json"]) == 0

        assert load.call_count == 1
        assert ConfigStore(config_path).load().selection == ["b.json"]
