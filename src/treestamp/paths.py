"""Manifest path rules: normalization, traversal rejection, conflicts."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import PurePosixPath, PureWindowsPath

from .errors import DuplicatePath, InvalidPath
from .schemas.manifest import Entry, FileEntry


def normalize_entry_path(raw: str) -> str:
    """Return the canonical form of a manifest path.

    Manifest paths are POSIX-style and relative to the scaffold root. ``.``
    segments and repeated or trailing slashes collapse; anything that could
    land outside the root is rejected.

    Raises:
        InvalidPath: empty, absolute, drive-qualified, backslash-separated,
            NUL-containing, or ``..``-traversing paths
    """
    if not raw or not raw.strip():
        raise InvalidPath(raw, "empty path")
    if "\x00" in raw:
        raise InvalidPath(raw, "NUL character in path")
    if "\\" in raw:
        raise InvalidPath(raw, "backslash separators are not allowed; use '/'")
    if raw.startswith("/") or PurePosixPath(raw).is_absolute():
        raise InvalidPath(raw, "absolute path")
    if PureWindowsPath(raw).drive:
        raise InvalidPath(raw, "drive-qualified path")

    parts: list[str] = []
    for segment in raw.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise InvalidPath(raw, "parent-directory traversal")
        parts.append(segment)

    if not parts:
        raise InvalidPath(raw, "path resolves to the scaffold root")
    return "/".join(parts)


def validate_entries(entries: Sequence[Entry]) -> list[str]:
    """Validate every entry path and return the normalized paths in order.

    Raises:
        InvalidPath: a path breaks the rules in ``normalize_entry_path`` or a
            file entry is also the parent of another entry
        DuplicatePath: two entries normalize to the same path, or to paths
            that differ only in letter case
    """
    normalized: list[str] = []
    # keyed by casefold(): case-insensitive filesystems would write both to one file
    seen: dict[str, tuple[str, str]] = {}
    for entry in entries:
        path = normalize_entry_path(entry.path)
        key = path.casefold()
        if key in seen:
            first_raw, first_path = seen[key]
            if first_path == path:
                detail = f"already declared as '{first_raw}'"
            else:
                detail = f"differs only in case from '{first_raw}'"
            raise DuplicatePath(entry.path, detail)
        seen[key] = (entry.path, path)
        normalized.append(path)

    file_paths = {
        path
        for path, entry in zip(normalized, entries, strict=True)
        if isinstance(entry, FileEntry)
    }
    for path in normalized:
        for parent in PurePosixPath(path).parents:
            parent_str = str(parent)
            if parent_str in file_paths:
                raise InvalidPath(path, f"parent '{parent_str}' is declared as a file")
    return normalized
