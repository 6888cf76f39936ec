"""Merging of remote and local file sets for a push."""

from collections.abc import Iterable

from ..models.blob import is_reserved


def in_directory(name: str, directories: Iterable[str]) -> bool:
    """Check if a gist entry is a member entry ``<dir>/...`` of a directory."""
    return any(name.startswith(directory + "/") for directory in directories)


def merge(
    remote_files: dict[str, str],
    local_files: dict[str, str],
    directories: Iterable[str] = (),
) -> dict[str, str]:
    """Union remote and local files, local content winning on collision.

    Remote files outside the current local selection are preserved, which
    lets a partial selection push without destroying previously synced
    files. A directory pushed from local replaces the remote one as a
    whole, so members deleted locally do not linger as remote entries.
    Reserved entries are dropped from both inputs; the caller regenerates
    them.

    Args:
        remote_files: Current gist contents
        local_files: Classified local files to push
        directories: Directories encoded into ``local_files``

    Returns:
        New merged mapping (inputs are not modified)
    """
    directories = tuple(directories)
    merged = {
        name: content
        for name, content in remote_files.items()
        if not is_reserved(name) and not in_directory(name, directories)
    }

    for name, content in local_files.items():
        if is_reserved(name):
            continue
        merged[name] = content

    return merged
