"""Shared test fixtures for treestamp."""

from pathlib import Path

import pytest
import yaml

from treestamp import config
from treestamp.schemas.manifest import DirectoryEntry, FileEntry, Manifest


@pytest.fixture(autouse=True)
def fresh_settings():
    """Rebuild the settings singleton so env changes do not leak between tests."""
    config.reload_settings()
    yield
    config.reload_settings()


@pytest.fixture
def crm_manifest() -> Manifest:
    """A small CRM-style project tree."""
    return Manifest(
        name="crm",
        defaults={"port": "5000"},
        entries=[
            DirectoryEntry(path="backend"),
            FileEntry(path="backend/app.py", content='app = Flask("{{name}}")\n'),
            FileEntry(
                path="frontend/src/App.js",
                content="export const title = '{{ name }}';\n",
            ),
            DirectoryEntry(path="nginx/conf.d"),
            FileEntry(
                path="docker-compose.yml",
                content='services:\n  backend:\n    ports:\n      - "{{port}}:{{port}}"\n',
            ),
            FileEntry(path="README.md", content="Project: {{name}}"),
        ],
    )


@pytest.fixture
def crm_context() -> dict[str, str]:
    return {"name": "noe-crm", "port": "5000"}


@pytest.fixture
def scaffold_root(tmp_path: Path) -> Path:
    """Output root that does not exist yet."""
    return tmp_path / "out"


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """A YAML manifest with one inline body and one source asset."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "Dockerfile.tmpl").write_text(
        "FROM python:3.12-slim\nLABEL project={{name}}\n", encoding="utf-8"
    )
    data = {
        "name": "crm",
        "defaults": {"port": 5000},
        "entries": [
            "backend/",
            {"path": "backend/Dockerfile", "source": "templates/Dockerfile.tmpl"},
            {"path": "README.md", "content": "Project: {{name}} on {{port}}\n"},
        ],
    }
    path = tmp_path / "treestamp.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path
