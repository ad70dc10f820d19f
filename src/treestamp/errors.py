"""Scaffold error taxonomy.

Validation errors (InvalidPath, DuplicatePath) are raised before anything on
disk is touched. Execution errors (AlreadyExists, UndefinedVariable, IOFailure)
may leave a partial tree; ``written`` lists what was completed.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any


class ErrorKind(str, Enum):
    """Scaffold failure kinds."""

    INVALID_PATH = "InvalidPath"
    DUPLICATE_PATH = "DuplicatePath"
    ALREADY_EXISTS = "AlreadyExists"
    UNDEFINED_VARIABLE = "UndefinedVariable"
    IO_FAILURE = "IOFailure"


# CLI exit codes; 1 and 2 stay with click for usage and load errors.
EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_PATH: 3,
    ErrorKind.DUPLICATE_PATH: 4,
    ErrorKind.ALREADY_EXISTS: 5,
    ErrorKind.UNDEFINED_VARIABLE: 6,
    ErrorKind.IO_FAILURE: 7,
}


class ScaffoldError(Exception):
    """Base class for scaffold failures.

    Usage:
        raise InvalidPath("../escape.txt", "parent traversal")
    """

    kind: ErrorKind

    def __init__(
        self,
        path: str | Path,
        detail: str,
        *,
        written: list[Path] | None = None,
    ) -> None:
        self.path = str(path)
        self.detail = detail
        self.written: list[Path] = list(written or [])
        super().__init__(f"[{self.kind.value}] {self.path}: {detail}")

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form for CLI output."""
        return {
            "kind": self.kind.value,
            "path": self.path,
            "detail": self.detail,
            "written": [str(p) for p in self.written],
        }


class InvalidPath(ScaffoldError):
    kind = ErrorKind.INVALID_PATH


class DuplicatePath(ScaffoldError):
    kind = ErrorKind.DUPLICATE_PATH


class AlreadyExists(ScaffoldError):
    kind = ErrorKind.ALREADY_EXISTS


class UndefinedVariable(ScaffoldError):
    """A template references a variable the context does not define."""

    kind = ErrorKind.UNDEFINED_VARIABLE

    def __init__(
        self,
        path: str | Path,
        variables: list[str],
        *,
        written: list[Path] | None = None,
    ) -> None:
        self.variables = list(variables)
        names = ", ".join(self.variables)
        super().__init__(path, f"undefined variable(s): {names}", written=written)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["variables"] = self.variables
        return data


class IOFailure(ScaffoldError):
    """Wraps the OSError (or encode error) behind a failed filesystem step."""

    kind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        path: str | Path,
        cause: BaseException,
        *,
        written: list[Path] | None = None,
    ) -> None:
        self.cause = cause
        detail = getattr(cause, "strerror", None) or str(cause) or type(cause).__name__
        super().__init__(path, detail, written=written)
