"""Pydantic models for scaffold manifests and results."""

import codecs
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .. import config


def _default_encoding() -> str:
    return config.settings.render.default_encoding


class DirectoryEntry(BaseModel):
    """Directory to create under the scaffold root."""

    kind: Literal["directory"] = "directory"
    path: str = Field(description="POSIX path relative to the scaffold root")


class FileEntry(BaseModel):
    """File to render and write under the scaffold root."""

    kind: Literal["file"] = "file"
    path: str = Field(description="POSIX path relative to the scaffold root")
    content: str = Field(default="", description="Template body with {{variable}} placeholders")
    encoding: str = Field(
        default_factory=_default_encoding,
        description="Codec used to write the rendered body",
    )

    @model_validator(mode="before")
    @classmethod
    def _resolve_source(cls, data: Any, info: ValidationInfo) -> Any:
        """Inline the body of a ``source:`` asset relative to the manifest file."""
        if not isinstance(data, dict) or "source" not in data:
            return data
        if "content" in data:
            raise ValueError(f"Entry '{data.get('path')}' sets both content and source")
        base_dir = (info.context or {}).get("base_dir")
        if base_dir is None:
            raise ValueError(
                f"Entry '{data.get('path')}' uses source but the manifest has no file location"
            )
        source_path = Path(base_dir) / data["source"]
        if not source_path.is_file():
            raise ValueError(f"Template source not found: {source_path}")
        encoding = data.get("encoding") or _default_encoding()
        try:
            codecs.lookup(encoding)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {encoding}") from exc
        resolved = {key: value for key, value in data.items() if key != "source"}
        resolved["content"] = source_path.read_text(encoding=encoding)
        return resolved

    @field_validator("encoding")
    @classmethod
    def _known_codec(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {value}") from exc
        return value


Entry = Annotated[DirectoryEntry | FileEntry, Field(discriminator="kind")]


def _infer_kind(item: Any) -> Any:
    if isinstance(item, str):
        if item.endswith("/"):
            return {"kind": "directory", "path": item}
        return {"kind": "file", "path": item}
    if isinstance(item, dict) and "kind" not in item:
        has_body = "content" in item or "source" in item
        path = str(item.get("path", ""))
        kind = "directory" if path.endswith("/") and not has_body else "file"
        return {**item, "kind": kind}
    return item


class Manifest(BaseModel):
    """Ordered list of entries plus default variable values."""

    name: str | None = Field(default=None, description="Human-readable manifest name")
    description: str | None = Field(default=None)
    defaults: dict[str, str] = Field(
        default_factory=dict,
        description="Variable values used when the caller does not supply them",
    )
    entries: list[Entry] = Field(default_factory=list)

    @field_validator("entries", mode="before")
    @classmethod
    def _entries_with_kind(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_infer_kind(item) for item in value]
        return value

    @field_validator("defaults", mode="before")
    @classmethod
    def _stringify_defaults(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value

    @property
    def files(self) -> list[FileEntry]:
        return [entry for entry in self.entries if isinstance(entry, FileEntry)]

    @property
    def directories(self) -> list[DirectoryEntry]:
        return [entry for entry in self.entries if isinstance(entry, DirectoryEntry)]

    @classmethod
    def from_yaml(cls, path: Path) -> "Manifest":
        """Load a manifest from a YAML file; ``source:`` paths resolve next to it."""
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data, context={"base_dir": path.parent})

    def to_yaml(self, path: Path) -> None:
        """Save the manifest to a YAML file with bodies inlined."""
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_none=True),
                f,
                Dumper=_BlockDumper,
                sort_keys=False,
                allow_unicode=True,
            )


class _BlockDumper(yaml.SafeDumper):
    """Dump multi-line bodies as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_BlockDumper.add_representer(str, _represent_str)


class ScaffoldResult(BaseModel):
    """Outcome of a completed scaffold run."""

    root: Path = Field(description="Realized scaffold root")
    created: list[Path] = Field(
        default_factory=list,
        description="Absolute path of every entry, in manifest order",
    )
    manifest_name: str | None = Field(default=None)

    @property
    def relative_paths(self) -> list[str]:
        return [path.relative_to(self.root).as_posix() for path in self.created]
