"""Discovery of the gist owned by this application."""

import json
import logging
from typing import Any

from ..models.blob import IDENTITY_FILENAME, MANIFEST_FILENAME, RemoteBlob
from .errors import RemoteError
from .store import RemoteStore

# Loose match for identities that drifted between devices
FAMILY_KEYWORDS = ("cursor", "git", "sync")


class BlobDiscovery:
    """Finds the owned gist among every gist of the account.

    Candidates are checked in tiers of decreasing specificity and the first
    match wins:

    1. identity file and manifest file present, identity matches exactly
    2. identity file present, identity matches exactly
    3. identity file written by ``known_username`` with an identity that
       contains one of FAMILY_KEYWORDS
    4. any gist with an identity file
    """

    def __init__(self, store: RemoteStore, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def _read_identity(self, blob: RemoteBlob) -> dict[str, Any] | None:
        """Parse a gist's identity file, or None if it is absent or broken.

        Raises:
            RemoteError: If the gist could not be fetched
        """
        if not blob.has_file(IDENTITY_FILENAME):
            return None

        content = blob.content_of(IDENTITY_FILENAME)
        if content is None:
            blob = self.store.hydrate(blob)
            content = blob.content_of(IDENTITY_FILENAME)

        if not content:
            self.logger.warning("Gist %s has an empty identity file", blob.id)
            return None

        try:
            record = json.loads(content)
        except ValueError as e:
            self.logger.warning("Error parsing identity file of gist %s: %s", blob.id, e)
            return None

        if not isinstance(record, dict):
            self.logger.warning("Identity file of gist %s is not a JSON object", blob.id)
            return None
        return record

    @staticmethod
    def _username_of(record: dict[str, Any]) -> str:
        github = record.get("github")
        if isinstance(github, dict):
            return github.get("username") or ""
        return ""

    def find_owned(
        self,
        identity: str,
        known_username: str | None = None,
        blobs: list[RemoteBlob] | None = None,
    ) -> str | None:
        """Find the id of the gist owned by ``identity``.

        Args:
            identity: Identity string of this application
            known_username: GitHub account name, enables tier 3
            blobs: Pre-fetched listing (fetched from the store if omitted)

        Returns:
            Gist id, or None if no candidate matched
        """
        if blobs is None:
            blobs = self.store.list_owned()

        candidates = [blob for blob in blobs if blob.has_file(IDENTITY_FILENAME)]
        self.logger.info(
            "Searching %d gists (%d with identity file) for %s",
            len(blobs), len(candidates), identity,
        )

        records: dict[str, dict[str, Any] | None] = {}
        for blob in list(candidates):
            try:
                records[blob.id] = self._read_identity(blob)
            except RemoteError as e:
                self.logger.warning("Skipping gist %s, could not read it: %s", blob.id, e)
                candidates.remove(blob)

        def identity_of(blob: RemoteBlob) -> str | None:
            record = records[blob.id]
            return record.get("extensionName") if record else None

        for blob in candidates:
            if blob.has_file(MANIFEST_FILENAME) and identity_of(blob) == identity:
                self.logger.info("Found gist %s with identity and manifest files", blob.id)
                return blob.id

        for blob in candidates:
            if identity_of(blob) == identity:
                self.logger.info("Found gist %s with matching identity file", blob.id)
                return blob.id

        if known_username:
            for blob in candidates:
                record = records[blob.id]
                if record is None:
                    continue
                name = record.get("extensionName")
                if (
                    self._username_of(record) == known_username
                    and isinstance(name, str)
                    and any(keyword in name for keyword in FAMILY_KEYWORDS)
                ):
                    self.logger.info("Found gist %s by username and related identity %s", blob.id, name)
                    return blob.id

        if candidates:
            blob = candidates[0]
            self.logger.warning(
                "Falling back to gist %s which has an identity file; "
                "it may not belong to this application",
                blob.id,
            )
            return blob.id

        self.logger.info("No existing gist found for %s", identity)
        return None

    def find_duplicates(
        self,
        identity: str,
        keep_id: str,
        blobs: list[RemoteBlob] | None = None,
    ) -> list[str]:
        """List ids of other gists whose identity file matches exactly.

        Args:
            identity: Identity string of this application
            keep_id: Gist to keep (excluded from the result)
            blobs: Pre-fetched listing (fetched from the store if omitted)
        """
        if blobs is None:
            blobs = self.store.list_owned()

        duplicates: list[str] = []
        for blob in blobs:
            if blob.id == keep_id or not blob.has_file(IDENTITY_FILENAME):
                continue
            try:
                record = self._read_identity(blob)
            except RemoteError as e:
                self.logger.warning("Skipping gist %s, could not read it: %s", blob.id, e)
                continue
            if record is not None and record.get("extensionName") == identity:
                duplicates.append(blob.id)
        return duplicates
