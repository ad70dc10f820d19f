"""Tree fingerprints and drift between a manifest rendering and disk."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import IOFailure
from .paths import validate_entries
from .render import render
from .schemas.manifest import FileEntry, Manifest


@dataclass(frozen=True, slots=True)
class TreeDiff:
    """File-level differences from a fresh rendering to a realized tree."""

    missing: list[str]
    modified: list[str]
    extra: list[str]

    @property
    def changes(self) -> list[str]:
        changes: list[str] = []
        changes.extend(f"Missing: {path}" for path in self.missing)
        changes.extend(f"Modified: {path}" for path in self.modified)
        changes.extend(f"Extra: {path}" for path in self.extra)
        return changes

    @property
    def clean(self) -> bool:
        return not (self.missing or self.modified or self.extra)


def _digest(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return f"sha256:{digest.hexdigest()}"


def plan_tree(manifest: Manifest, context: Mapping[str, str]) -> dict[str, str | None]:
    """Render ``manifest`` in memory.

    Returns:
        Normalized relative path -> content hash for files, None for
        directories, in manifest order
    """
    planned: dict[str, str | None] = {}
    for entry, relative in zip(manifest.entries, validate_entries(manifest.entries), strict=True):
        if isinstance(entry, FileEntry):
            rendered = render(entry.content, context, path=relative)
            try:
                data = rendered.encode(entry.encoding)
            except UnicodeEncodeError as exc:
                raise IOFailure(relative, exc) from exc
            planned[relative] = _digest(data)
        else:
            planned[relative] = None
    return planned


def tree_hashes(root: Path) -> dict[str, str]:
    """Content hash of every file under ``root`` keyed by POSIX relative path."""
    hashes: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        if path.is_file():
            hashes[path.relative_to(root).as_posix()] = _sha256(path)
    return hashes


def tree_fingerprint(root: Path) -> str:
    """Stable digest over every file's relative path and content."""
    hashes = tree_hashes(root)
    seed = "|".join(f"{path}:{hash_value}" for path, hash_value in sorted(hashes.items()))
    return _digest(seed.encode("utf-8"))


def diff_tree(root: Path, manifest: Manifest, context: Mapping[str, str]) -> TreeDiff:
    """Compare the tree under ``root`` with what ``manifest`` would produce.

    Directories only count as missing when absent; ``extra`` lists files the
    manifest does not produce.
    """
    planned = plan_tree(manifest, context)
    current = tree_hashes(root) if root.is_dir() else {}

    missing: list[str] = []
    modified: list[str] = []
    for relative, expected in planned.items():
        if expected is None:
            if not root.joinpath(*relative.split("/")).is_dir():
                missing.append(relative)
        elif relative not in current:
            missing.append(relative)
        elif current[relative] != expected:
            modified.append(relative)

    planned_files = {path for path, expected in planned.items() if expected is not None}
    extra = sorted(set(current) - planned_files)
    return TreeDiff(missing=missing, modified=modified, extra=extra)
