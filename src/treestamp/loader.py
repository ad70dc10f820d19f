"""Manifest and context loading."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from . import config
from .schemas.manifest import DirectoryEntry, FileEntry, Manifest


def load_manifest(path: Path) -> Manifest:
    """Load a manifest from a YAML or JSON file.

    ``source:`` entries are read relative to the manifest's directory.
    """
    if path.suffix.lower() == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        return Manifest.model_validate(data, context={"base_dir": path.parent})
    return Manifest.from_yaml(path)


def save_manifest(manifest: Manifest, path: Path) -> Path:
    """Write ``manifest`` as YAML, creating the parent directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest.to_yaml(path)
    return path


def manifest_from_directory(
    template_dir: Path,
    *,
    name: str | None = None,
    ignored_names: Iterable[str] | None = None,
) -> Manifest:
    """Capture a template directory as a manifest.

    Every directory becomes a directory entry and every file a file entry with
    its UTF-8 text as the body. Entries are sorted by path so the same tree
    always yields the same manifest.
    """
    if not template_dir.is_dir():
        raise FileNotFoundError(f"Template directory not found: {template_dir}")

    ignored = set(config.settings.capture.ignored_names if ignored_names is None else ignored_names)
    entries: list[DirectoryEntry | FileEntry] = []
    paths = sorted(template_dir.rglob("*"), key=lambda item: item.relative_to(template_dir).parts)
    for path in paths:
        rel = path.relative_to(template_dir)
        if any(part in ignored for part in rel.parts):
            continue
        if path.is_dir():
            entries.append(DirectoryEntry(path=rel.as_posix()))
        elif path.is_file():
            entries.append(
                FileEntry(
                    path=rel.as_posix(),
                    content=path.read_text(encoding="utf-8"),
                    encoding="utf-8",
                )
            )
    return Manifest(name=name or template_dir.name, entries=entries)


def parse_var_pairs(pairs: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings. The value may contain further ``=``."""
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid variable '{pair}'. Expected KEY=VALUE.")
        parsed[key] = value
    return parsed


def load_vars_file(path: Path) -> dict[str, str]:
    """Load a flat YAML (or JSON) mapping of variable values."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Variables file must contain a mapping: {path}")
    values: dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            raise ValueError(f"Variable '{key}' in {path} must be a scalar")
        values[str(key)] = "" if value is None else str(value)
    return values


def build_context(
    manifest: Manifest,
    pairs: Iterable[str] = (),
    vars_file: Path | None = None,
) -> Mapping[str, str]:
    """Merge manifest defaults, a vars file and ``KEY=VALUE`` pairs.

    Later sources win. The returned mapping is read-only.
    """
    values = dict(manifest.defaults)
    if vars_file is not None:
        values.update(load_vars_file(vars_file))
    values.update(parse_var_pairs(pairs))
    return MappingProxyType(values)
