"""Tests for merging remote and local file sets."""

from settings_sync.core.merge import merge
from settings_sync.models.blob import IDENTITY_FILENAME, MANIFEST_FILENAME


class TestMerge:
    """Tests for merge()."""

    def test_local_wins_and_remote_only_kept(self) -> None:
        remote = {"settings.json": '{"old": true}', "keybindings.json": "[]"}
        local = {"settings.json": '{"new": true}', "rules.md": "rule\n"}

        merged = merge(remote, local)

        assert merged == {
            "settings.json": '{"new": true}',
            "keybindings.json": "[]",
            "rules.md": "rule\n",
        }

    def test_reserved_entries_dropped(self) -> None:
        remote = {IDENTITY_FILENAME: "{}", MANIFEST_FILENAME: "{}", "a.json": "{}"}
        local = {MANIFEST_FILENAME: "{}"}

        assert merge(remote, local) == {"a.json": "{}"}

    def test_inputs_not_modified(self) -> None:
        remote = {"a.json": "{}"}
        local = {"b.json": "{}"}

        merge(remote, local)

        assert remote == {"a.json": "{}"}
        assert local == {"b.json": "{}"}

    def test_empty_inputs(self) -> None:
        assert merge({}, {}) == {}

    def test_pushed_directory_replaces_remote_members(self) -> None:
        remote = {
            "snippets.json": "{old manifest}",
            "snippets/a.json": "YQ==",
            "snippets/b.json": "Yg==",
            "snippets-extra.md": "kept\n",
        }
        local = {"snippets.json": "{new manifest}", "snippets/a.json": "YQ=="}

        merged = merge(remote, local, directories=["snippets"])

        assert merged == {
            "snippets.json": "{new manifest}",
            "snippets/a.json": "YQ==",
            "snippets-extra.md": "kept\n",
        }

    def test_remote_directory_kept_when_not_pushed(self) -> None:
        remote = {"snippets.json": "{}", "snippets/a.json": "YQ=="}

        assert merge(remote, {"settings.json": "{}"}) == {**remote, "settings.json": "{}"}
