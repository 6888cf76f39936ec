"""File classification and normalization.

Every file that crosses the wire goes through :func:`classify`, on push for
local content and on pull for remote content, so both ends agree on what a
file is and how it looks.

- ``.json`` files are passed through untouched; they are only checked for
  emptiness and syntax. Malformed JSON is never repaired, it is rejected.
- Everything else is text: line endings become ``\\n``, surrounding
  whitespace is stripped and exactly one trailing newline is added.
- Content that parses as a directory manifest is recognized regardless of
  its name.
"""

import base64
import binascii
import json
import mimetypes
from pathlib import PurePosixPath
from typing import Any

from ..models.blob import DirectoryManifest, FileCategory, ManifestMember, ProcessedFile
from .errors import InvalidManifest

JSON_EXTENSIONS = (".json",)
KNOWN_MANIFEST_VERSIONS = (DirectoryManifest.LEGACY_VERSION, *DirectoryManifest.SIBLING_VERSIONS)


def category_for(name: str) -> str:
    """Determine the category implied by a file name."""
    if name.lower().endswith(JSON_EXTENSIONS):
        return FileCategory.JSON
    return FileCategory.TEXT


def normalize_text(content: str) -> str:
    """Normalize line endings and surrounding whitespace.

    Returns an empty string for blank content, otherwise the stripped
    content with a single trailing newline.
    """
    cleaned = content.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not cleaned:
        return ""
    return cleaned + "\n"


def _parse_json(content: str) -> Any:
    try:
        return json.loads(content)
    except ValueError:
        return None


def _is_valid_json(content: str) -> bool:
    try:
        json.loads(content)
    except ValueError:
        return False
    return True


def is_directory_manifest(content: str) -> bool:
    """Check if content is a directory manifest."""
    if not content or not content.strip():
        return False

    parsed = _parse_json(content)
    return (
        isinstance(parsed, dict)
        and isinstance(parsed.get("directoryName"), str)
        and bool(parsed["directoryName"])
        and isinstance(parsed.get("images"), dict)
        and parsed.get("version") is not None
    )


def classify(name: str, raw: str | bytes) -> ProcessedFile:
    """Classify and normalize a file.

    Args:
        name: File name, used to pick the category
        raw: File content as text or UTF-8 bytes

    Returns:
        ProcessedFile; ``valid`` is False for empty content, undecodable
        bytes and malformed JSON
    """
    category = category_for(name)

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return ProcessedFile(content="", category=category, valid=False)

    if is_directory_manifest(raw):
        return ProcessedFile(content=raw, category=FileCategory.DIRECTORY_MANIFEST, valid=True)

    if category == FileCategory.JSON:
        if not raw.strip() or not _is_valid_json(raw):
            return ProcessedFile(content="", category=category, valid=False)
        return ProcessedFile(content=raw, category=category, valid=True)

    normalized = normalize_text(raw)
    return ProcessedFile(content=normalized, category=category, valid=bool(normalized))


# ---------------------------------------------------------------------------
# Directory manifests
# ---------------------------------------------------------------------------

def is_safe_relative_path(path: str) -> bool:
    """Check that a relative path cannot escape the directory it is joined to."""
    if not path or "\\" in path:
        return False
    pure = PurePosixPath(path)
    return not pure.is_absolute() and ".." not in pure.parts


def _normalize_version(version: Any) -> str:
    if isinstance(version, (int, float)) and not isinstance(version, bool):
        return f"{float(version):.1f}"
    return str(version)


def decode_manifest(name: str, content: str) -> DirectoryManifest:
    """Parse and validate a directory manifest.

    Args:
        name: Gist entry name, used in error messages
        content: Manifest JSON

    Raises:
        InvalidManifest: On malformed structure, unknown version, unsafe
            names or (v1) missing or invalid embedded data
    """
    parsed = _parse_json(content)
    if not isinstance(parsed, dict):
        raise InvalidManifest(f"Manifest {name} is not a JSON object")

    directory_name = parsed.get("directoryName")
    images = parsed.get("images")
    if not isinstance(directory_name, str) or not directory_name or not isinstance(images, dict):
        raise InvalidManifest(f"Invalid directory data structure in {name}")
    if not is_safe_relative_path(directory_name):
        raise InvalidManifest(f"Unsafe directory name in {name}: {directory_name!r}")

    version = _normalize_version(parsed.get("version"))
    if version not in KNOWN_MANIFEST_VERSIONS:
        raise InvalidManifest(f"Unsupported manifest version in {name}: {version}")

    manifest = DirectoryManifest(directory_name=directory_name, version=version)

    for member_name, member_data in images.items():
        if not is_safe_relative_path(member_name):
            raise InvalidManifest(f"Unsafe member name in {name}: {member_name!r}")
        if not isinstance(member_data, dict):
            member_data = {}

        member = ManifestMember(
            name=member_name,
            mime_type=member_data.get("mimeType") or "application/octet-stream",
            size=member_data.get("size"),
        )

        if manifest.embeds_data:
            data = member_data.get("data")
            if not isinstance(data, str):
                raise InvalidManifest(f"Member {member_name} in {name} has no embedded data")
            decode_member(member_name, data)
            member.data = data

        manifest.members[member_name] = member

    return manifest


def decode_member(name: str, content: str) -> bytes:
    """Decode the base64 content of a manifest member.

    Raises:
        InvalidManifest: If the content is not valid base64
    """
    try:
        return base64.b64decode(content.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidManifest(f"Invalid base64 content for {name}: {e}") from e


def encode_directory(directory_name: str, members: dict[str, bytes]) -> dict[str, str]:
    """Encode a directory as a v3 manifest plus sibling entries.

    Args:
        directory_name: Name of the selected directory
        members: Mapping of relative POSIX path to file bytes

    Returns:
        Gist entries: the manifest under ``<directory>.json`` and one
        base64 entry per member under ``<directory>/<member>``
    """
    manifest = DirectoryManifest(directory_name=directory_name)
    entries: dict[str, str] = {}

    for member_name in sorted(members):
        data = members[member_name]
        mime_type, _ = mimetypes.guess_type(member_name)
        manifest.members[member_name] = ManifestMember(
            name=member_name,
            mime_type=mime_type or "application/octet-stream",
            size=len(data),
        )
        entries[manifest.sibling_name(member_name)] = base64.b64encode(data).decode("ascii")

    return {manifest.entry_name: manifest.to_json(), **entries}
