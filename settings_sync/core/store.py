"""Gist CRUD operations."""

import logging
from typing import Any

from ..models.blob import RemoteBlob
from .client import GistClient
from .errors import FileTooLarge, RemoteError

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB per file
PAGE_SIZE = 100


class RemoteStore:
    """Create, fetch, replace, delete and list gists."""

    def __init__(self, client: GistClient, logger: logging.Logger | None = None) -> None:
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate_files(self, files: dict[str, str]) -> None:
        """Check every file is a UTF-8 string within the size cap.

        Raises:
            TypeError: If a value is not a string
            FileTooLarge: If a file exceeds MAX_FILE_SIZE bytes
        """
        for name, content in files.items():
            if not isinstance(content, str):
                raise TypeError(f"Invalid file structure for {name}: content must be a string")

            size = len(content.encode("utf-8"))
            if size > MAX_FILE_SIZE:
                raise FileTooLarge(name, size, MAX_FILE_SIZE)

    @staticmethod
    def _to_payload(files: dict[str, str]) -> dict[str, dict[str, str]]:
        return {name: {"content": content} for name, content in files.items()}

    def _to_blob(self, response: Any, operation: str) -> RemoteBlob:
        if not isinstance(response, dict):
            raise RemoteError(f"Unexpected response to {operation}: {str(response)[:200]}")
        return RemoteBlob.from_dict(response)

    # -------------------------------------------------------------------------
    # Gist Operations
    # -------------------------------------------------------------------------

    def create(self, description: str, public: bool, files: dict[str, str]) -> RemoteBlob:
        """Create a new gist.

        Args:
            description: Gist description
            public: Whether the gist is public
            files: Mapping of file name to content

        Returns:
            The created gist, including its id and html_url
        """
        self._validate_files(files)
        self.logger.info("Creating gist with %d files", len(files))
        response = self.client.post(
            "/gists",
            json_data={
                "description": description,
                "public": public,
                "files": self._to_payload(files),
            },
        )
        return self._to_blob(response, "create")

    def fetch(self, blob_id: str) -> RemoteBlob:
        """Fetch a gist with all file contents.

        Files the API truncated are downloaded in full from their raw URL.
        A truncated file without a raw URL keeps ``None`` as content.

        Raises:
            NotFound: If the gist does not exist
        """
        response = self.client.get(f"/gists/{blob_id}")
        blob = self._to_blob(response, "fetch")

        for name, raw_url in list(blob.truncated.items()):
            if not raw_url:
                self.logger.warning("File %s of gist %s is truncated and has no raw URL", name, blob_id)
                continue
            self.logger.info("Downloading truncated file %s of gist %s", name, blob_id)
            blob.files[name] = self.client.get_raw(raw_url)
            del blob.truncated[name]

        return blob

    def replace(
        self,
        blob_id: str,
        files: dict[str, str],
        description: str | None = None,
        remove: list[str] | None = None,
    ) -> RemoteBlob:
        """Write the merged file set of a gist.

        The gist API patches file by file: every name in ``files`` is
        written, names in ``remove`` are sent as ``null`` to delete them and
        all other remote files stay untouched. Callers are expected to have
        merged remote content already.

        Args:
            blob_id: Gist ID
            files: Merged file set to write
            description: Optional new description
            remove: File names to delete from the gist

        Raises:
            NotFound: If the gist does not exist
        """
        self._validate_files(files)

        payload: dict[str, Any] = dict(self._to_payload(files))
        for name in remove or []:
            if name not in files:
                payload[name] = None

        body: dict[str, Any] = {"files": payload}
        if description is not None:
            body["description"] = description

        self.logger.info("Replacing gist %s with %d files", blob_id, len(files))
        response = self.client.patch(f"/gists/{blob_id}", json_data=body)
        return self._to_blob(response, "replace")

    def delete(self, blob_id: str) -> None:
        """Delete a gist."""
        self.logger.info("Deleting gist %s", blob_id)
        self.client.delete(f"/gists/{blob_id}")

    def list_owned(self) -> list[RemoteBlob]:
        """List every gist visible to the authenticated user.

        The result is not filtered by ownership. File contents are usually
        absent from listings.
        """
        blobs: list[RemoteBlob] = []
        page = 1

        while True:
            response = self.client.get("/gists", query_params={"per_page": PAGE_SIZE, "page": page})
            if not isinstance(response, list):
                raise RemoteError(f"Unexpected response to list: {str(response)[:200]}")

            blobs.extend(RemoteBlob.from_dict(item) for item in response)
            if len(response) < PAGE_SIZE:
                break
            page += 1

        self.logger.info("Found %d gists", len(blobs))
        return blobs

    def hydrate(self, blob: RemoteBlob) -> RemoteBlob:
        """Return the blob with file contents, fetching it if needed."""
        if blob.is_complete:
            return blob
        return self.fetch(blob.id)

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    def whoami(self, token: str | None = None) -> str:
        """Return the login of the token's owner.

        Args:
            token: Check this token instead of the configured one
        """
        response = self.client.request("GET", "/user", token=token)
        if not isinstance(response, dict) or "login" not in response:
            raise RemoteError(f"Unexpected response to /user: {str(response)[:200]}")
        return response["login"]
