"""Scaffold engine: materialize a manifest under an output root."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from .errors import AlreadyExists, IOFailure, ScaffoldError
from .paths import validate_entries
from .render import render
from .schemas.manifest import DirectoryEntry, FileEntry, Manifest, ScaffoldResult

logger = logging.getLogger(__name__)


class ScaffoldState(str, Enum):
    """Lifecycle of a single scaffold run."""

    IDLE = "idle"
    VALIDATING = "validating"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"


def root_present(root: Path) -> bool:
    """Whether anything, including a dangling symlink, occupies ``root``.

    Raises:
        IOFailure: the path cannot be inspected (name too long, permission denied)
    """
    try:
        return root.exists() or root.is_symlink()
    except OSError as exc:
        raise IOFailure(root, exc) from exc


class ScaffoldRun:
    """One scaffold invocation. Instances are single-use.

    Validation happens before the root is touched, so InvalidPath and
    DuplicatePath never modify the filesystem. Once writing starts, the first
    failure stops the run and the raised error's ``written`` lists every entry
    completed before it. Nothing is rolled back.
    """

    def __init__(
        self,
        root: Path,
        manifest: Manifest,
        context: Mapping[str, str],
        *,
        overwrite: bool = False,
    ) -> None:
        self.root = Path(root).absolute()
        self.manifest = manifest
        self.context: Mapping[str, str] = MappingProxyType(dict(context))
        self.overwrite = overwrite
        self.state = ScaffoldState.IDLE
        self.written: list[Path] = []

    def execute(self) -> ScaffoldResult:
        """Validate, then write every entry in manifest order.

        Raises:
            InvalidPath, DuplicatePath: manifest rejected; nothing written
            AlreadyExists: root present and overwrite is off
            UndefinedVariable: a template references a missing variable
            IOFailure: a filesystem call or encode step failed
            RuntimeError: the run was already executed
        """
        if self.state is not ScaffoldState.IDLE:
            raise RuntimeError(f"Scaffold run is {self.state.value}; create a new ScaffoldRun")

        self.state = ScaffoldState.VALIDATING
        try:
            paths = validate_entries(self.manifest.entries)
        except ScaffoldError:
            self.state = ScaffoldState.FAILED
            raise

        self.state = ScaffoldState.WRITING
        try:
            self._prepare_root()
            for entry, relative in zip(self.manifest.entries, paths, strict=True):
                target = self.root.joinpath(*relative.split("/"))
                if isinstance(entry, DirectoryEntry):
                    self._ensure_directory(target)
                else:
                    self._write_file(entry, target)
                self.written.append(target)
                logger.debug("Wrote %s %s", entry.kind, relative)
        except ScaffoldError as exc:
            exc.written = list(self.written)
            self.state = ScaffoldState.FAILED
            logger.warning(
                "Scaffold of %s failed after %d of %d entries: %s",
                self.root,
                len(self.written),
                len(paths),
                exc,
            )
            raise

        self.state = ScaffoldState.COMPLETED
        logger.info("Scaffolded %d entries under %s", len(self.written), self.root)
        return ScaffoldResult(
            root=self.root,
            created=list(self.written),
            manifest_name=self.manifest.name,
        )

    def _prepare_root(self) -> None:
        root = self.root
        if root_present(root):
            if not self.overwrite:
                raise AlreadyExists(root, "scaffold root already exists")
            logger.info("Removing existing scaffold root %s", root)
            try:
                if root.is_dir() and not root.is_symlink():
                    shutil.rmtree(root)
                else:
                    root.unlink()
            except OSError as exc:
                raise IOFailure(root, exc) from exc
        try:
            root.mkdir()
        except OSError as exc:
            raise IOFailure(root, exc) from exc

    def _ensure_directory(self, target: Path) -> None:
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailure(target, exc) from exc

    def _write_file(self, entry: FileEntry, target: Path) -> None:
        rendered = render(entry.content, self.context, path=str(target))
        try:
            data = rendered.encode(entry.encoding)
        except UnicodeEncodeError as exc:
            raise IOFailure(target, exc) from exc
        self._ensure_directory(target.parent)
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise IOFailure(target, exc) from exc


def scaffold(
    root: Path,
    manifest: Manifest,
    context: Mapping[str, str],
    *,
    overwrite: bool = False,
) -> ScaffoldResult:
    """Materialize ``manifest`` under ``root`` with ``context`` substituted.

    Args:
        root: Directory to create; its parent must already exist
        manifest: Entries to write, in order
        context: Variable values for ``{{name}}`` placeholders
        overwrite: Remove an existing ``root`` first. Destructive; callers
            confirm before passing True

    Returns:
        ScaffoldResult listing one created path per entry
    """
    return ScaffoldRun(root, manifest, context, overwrite=overwrite).execute()
