"""Tests for gist CRUD operations."""

from unittest.mock import MagicMock

import pytest

from settings_sync.core.client import GistClient
from settings_sync.core.errors import FileTooLarge, RemoteError
from settings_sync.core.store import MAX_FILE_SIZE, PAGE_SIZE, RemoteStore
from settings_sync.models.blob import RemoteBlob


def gist_payload(blob_id: str, files: dict[str, str | None]) -> dict:
    return {
        "id": blob_id,
        "description": "Cursor Settings Sync Backup",
        "public": False,
        "html_url": f"https://gist.github.com/{blob_id}",
        "files": {
            name: ({"filename": name} if content is None else {"filename": name, "content": content})
            for name, content in files.items()
        },
    }


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=GistClient)


@pytest.fixture
def store(client: MagicMock) -> RemoteStore:
    return RemoteStore(client)


class TestRemoteStore:
    """Tests for RemoteStore class."""

    def test_create(self, store: RemoteStore, client: MagicMock) -> None:
        client.post.return_value = gist_payload("abc", {"settings.json": "{}"})

        blob = store.create("My backup", False, {"settings.json": "{}"})

        assert blob.id == "abc"
        assert blob.html_url == "https://gist.github.com/abc"
        client.post.assert_called_once_with(
            "/gists",
            json_data={
                "description": "My backup",
                "public": False,
                "files": {"settings.json": {"content": "{}"}},
            },
        )

    def test_fetch(self, store: RemoteStore, client: MagicMock) -> None:
        client.get.return_value = gist_payload("abc", {"settings.json": "{}"})

        blob = store.fetch("abc")

        assert blob.content_of("settings.json") == "{}"
        client.get.assert_called_once_with("/gists/abc")

    def test_fetch_unexpected_response(self, store: RemoteStore, client: MagicMock) -> None:
        client.get.return_value = "<html>"

        with pytest.raises(RemoteError, match="Unexpected response"):
            store.fetch("abc")

    def test_fetch_completes_truncated_file(self, store: RemoteStore, client: MagicMock) -> None:
        payload = gist_payload("abc", {"settings.json": "{}"})
        payload["files"]["keybindings.json"] = {
            "filename": "keybindings.json",
            "content": "[{\"key\":",
            "truncated": True,
            "raw_url": "https://gist.githubusercontent.com/raw/keybindings.json",
        }
        client.get.return_value = payload
        client.get_raw.return_value = "[{\"key\": \"ctrl+a\"}]"

        blob = store.fetch("abc")

        assert blob.content_of("keybindings.json") == "[{\"key\": \"ctrl+a\"}]"
        assert blob.truncated == {}
        client.get_raw.assert_called_once_with("https://gist.githubusercontent.com/raw/keybindings.json")

    def test_fetch_truncated_file_without_raw_url(self, store: RemoteStore, client: MagicMock) -> None:
        payload = gist_payload("abc", {})
        payload["files"]["big.md"] = {"filename": "big.md", "content": "partial", "truncated": True}
        client.get.return_value = payload

        blob = store.fetch("abc")

        assert blob.has_file("big.md")
        assert blob.content_of("big.md") is None
        client.get_raw.assert_not_called()

    def test_replace_removes_only_named_entries(self, store: RemoteStore, client: MagicMock) -> None:
        client.patch.return_value = gist_payload("abc", {"settings.json": "{}"})

        store.replace(
            "abc",
            {"settings.json": "{}"},
            description="desc",
            remove=["settings.json", "snippets/old.json"],
        )

        body = client.patch.call_args.kwargs["json_data"]
        assert body["files"] == {"settings.json": {"content": "{}"}, "snippets/old.json": None}
        assert body["description"] == "desc"

    def test_replace_without_description(self, store: RemoteStore, client: MagicMock) -> None:
        client.patch.return_value = gist_payload("abc", {})

        store.replace("abc", {"a.md": "a\n"})

        assert "description" not in client.patch.call_args.kwargs["json_data"]

    def test_file_too_large(self, store: RemoteStore, client: MagicMock) -> None:
        with pytest.raises(FileTooLarge) as exc_info:
            store.create("desc", False, {"big.txt": "x" * (MAX_FILE_SIZE + 1)})

        assert exc_info.value.name == "big.txt"
        assert exc_info.value.user_action_required is True
        client.post.assert_not_called()

    def test_non_string_content(self, store: RemoteStore, client: MagicMock) -> None:
        with pytest.raises(TypeError, match="must be a string"):
            store.replace("abc", {"settings.json": {"a": 1}})  # type: ignore[dict-item]

    def test_delete(self, store: RemoteStore, client: MagicMock) -> None:
        store.delete("abc")

        client.delete.assert_called_once_with("/gists/abc")

    def test_list_owned_follows_pages(self, store: RemoteStore, client: MagicMock) -> None:
        first_page = [gist_payload(str(i), {"a.json": None}) for i in range(PAGE_SIZE)]
        second_page = [gist_payload("last", {"b.json": None})]
        client.get.side_effect = [first_page, second_page]

        blobs = store.list_owned()

        assert len(blobs) == PAGE_SIZE + 1
        assert blobs[-1].id == "last"
        assert blobs[0].content_of("a.json") is None
        pages = [call.kwargs["query_params"]["page"] for call in client.get.call_args_list]
        assert pages == [1, 2]

    def test_list_owned_rejects_non_list(self, store: RemoteStore, client: MagicMock) -> None:
        client.get.return_value = {"message": "weird"}

        with pytest.raises(RemoteError):
            store.list_owned()

    def test_hydrate_complete_blob(self, store: RemoteStore, client: MagicMock) -> None:
        blob = RemoteBlob(id="abc", files={"a.json": "{}"})

        assert store.hydrate(blob) is blob
        client.get.assert_not_called()

    def test_hydrate_fetches_missing_content(self, store: RemoteStore, client: MagicMock) -> None:
        client.get.return_value = gist_payload("abc", {"a.json": "{}"})

        blob = store.hydrate(RemoteBlob(id="abc", files={"a.json": None}))

        assert blob.content_of("a.json") == "{}"

    def test_whoami(self, store: RemoteStore, client: MagicMock) -> None:
        client.request.return_value = {"login": "octocat"}

        assert store.whoami(token="other") == "octocat"
        client.request.assert_called_once_with("GET", "/user", token="other")
