"""Literal ``{{variable}}`` substitution.

No expressions, filters or escaping: a placeholder is a variable name with
optional surrounding whitespace, and everything else is copied verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from .errors import UndefinedVariable
from .schemas.manifest import Manifest

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_.-]*)\s*\}\}")


def find_placeholders(text: str) -> list[str]:
    """Return placeholder names in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(text)))


def render(text: str, context: Mapping[str, str], *, path: str = "<template>") -> str:
    """Substitute every placeholder in ``text`` from ``context``.

    Substituted values are not scanned again.

    Raises:
        UndefinedVariable: any placeholder has no context entry; nothing is
            returned in that case
    """
    missing = [name for name in find_placeholders(text) if name not in context]
    if missing:
        raise UndefinedVariable(path, missing)
    return PLACEHOLDER_PATTERN.sub(lambda match: context[match.group(1)], text)


def manifest_variables(manifest: Manifest) -> list[str]:
    """Sorted names referenced by any file entry."""
    names: set[str] = set()
    for entry in manifest.files:
        names.update(find_placeholders(entry.content))
    return sorted(names)


def missing_variables(manifest: Manifest, context: Mapping[str, str]) -> list[str]:
    """Sorted names referenced by the manifest but absent from ``context``."""
    return [name for name in manifest_variables(manifest) if name not in context]


def check_context(manifest: Manifest, context: Mapping[str, str]) -> None:
    """Fail before any write if a file entry references a missing variable.

    Raises:
        UndefinedVariable: for the first file entry with missing names
    """
    for entry in manifest.files:
        missing = [name for name in find_placeholders(entry.content) if name not in context]
        if missing:
            raise UndefinedVariable(entry.path, missing)
