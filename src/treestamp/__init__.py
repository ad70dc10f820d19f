"""Template-driven project scaffolding."""

from .engine import ScaffoldRun, ScaffoldState, scaffold
from .errors import (
    AlreadyExists,
    DuplicatePath,
    ErrorKind,
    InvalidPath,
    IOFailure,
    ScaffoldError,
    UndefinedVariable,
)
from .schemas.manifest import DirectoryEntry, FileEntry, Manifest, ScaffoldResult

__all__ = [
    "scaffold",
    "ScaffoldRun",
    "ScaffoldState",
    "Manifest",
    "DirectoryEntry",
    "FileEntry",
    "ScaffoldResult",
    "ScaffoldError",
    "ErrorKind",
    "InvalidPath",
    "DuplicatePath",
    "AlreadyExists",
    "UndefinedVariable",
    "IOFailure",
]
