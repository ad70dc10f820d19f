"""Pydantic schemas for manifests and scaffold results."""

from .manifest import DirectoryEntry, Entry, FileEntry, Manifest, ScaffoldResult

__all__ = [
    "Manifest",
    "Entry",
    "DirectoryEntry",
    "FileEntry",
    "ScaffoldResult",
]
