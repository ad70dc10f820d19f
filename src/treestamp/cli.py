"""CLI entrypoint for treestamp."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import IO, Any

import click
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from . import config
from .audit import diff_tree, plan_tree, tree_fingerprint
from .engine import root_present, scaffold
from .errors import AlreadyExists, ScaffoldError
from .loader import build_context, load_manifest, manifest_from_directory, save_manifest
from .paths import validate_entries
from .render import check_context, manifest_variables, missing_variables
from .schemas.manifest import Manifest

LOAD_ERRORS = (OSError, ValueError, ValidationError, yaml.YAMLError)


class ScaffoldCliError(click.ClickException):
    """Reports a ScaffoldError with its kind-specific exit code."""

    def __init__(self, error: ScaffoldError) -> None:
        super().__init__(str(error))
        self.error = error
        self.exit_code = error.exit_code

    def show(self, file: IO[Any] | None = None) -> None:
        click.echo(f"Error {self.format_message()}", err=True, file=file)
        for path in self.error.written:
            click.echo(f"  written before failure: {path}", err=True, file=file)


def _configure_logging(verbose: int, default_level: str) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, default_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group()
@click.version_option(package_name="treestamp")
@click.option("--verbose", "-v", count=True, help="Increase log output (-v info, -vv debug).")
def main(verbose: int) -> None:
    """Stamp out project trees from template manifests."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
        config.reload_settings()
    _configure_logging(verbose, config.settings.cli.log_level)


_MANIFEST_OPTIONS = (
    click.option(
        "--manifest",
        "-m",
        "manifest_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Manifest file (YAML or JSON).",
    ),
    click.option(
        "--template-dir",
        "-t",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help="Template directory to capture as the manifest.",
    ),
    click.option(
        "--var",
        "variables",
        multiple=True,
        metavar="KEY=VALUE",
        help="Template variable; repeatable.",
    ),
    click.option(
        "--vars-file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="YAML mapping of template variables.",
    ),
)


def manifest_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared manifest and variable options."""
    for option in reversed(_MANIFEST_OPTIONS):
        func = option(func)
    return func


def _load_inputs(
    manifest_path: Path | None,
    template_dir: Path | None,
    variables: tuple[str, ...],
    vars_file: Path | None,
) -> tuple[Manifest, Mapping[str, str]]:
    if manifest_path is not None and template_dir is not None:
        raise click.UsageError("Use either --manifest or --template-dir, not both.")
    try:
        if template_dir is not None:
            manifest = manifest_from_directory(template_dir)
        else:
            if manifest_path is None:
                manifest_path = Path.cwd() / config.settings.cli.manifest_filename
                if not manifest_path.is_file():
                    raise click.UsageError(
                        f"No --manifest given and {manifest_path.name} not found in the "
                        "working directory."
                    )
            manifest = load_manifest(manifest_path)
        context = build_context(manifest, variables, vars_file)
    except LOAD_ERRORS as exc:
        raise click.ClickException(str(exc)) from exc
    return manifest, context


@main.command("new")
@click.argument("root", type=click.Path(path_type=Path))
@manifest_options
@click.option("--force", is_flag=True, help="Delete ROOT first if it already exists.")
@click.option("--yes", "-y", is_flag=True, help="Do not confirm before --force deletes ROOT.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
def new(
    root: Path,
    manifest_path: Path | None,
    template_dir: Path | None,
    variables: tuple[str, ...],
    vars_file: Path | None,
    force: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Scaffold a new project tree at ROOT."""
    manifest, context = _load_inputs(manifest_path, template_dir, variables, vars_file)

    # same failure order as scaffold(): paths, then root, then variables
    try:
        validate_entries(manifest.entries)
        occupied = root_present(root.absolute())
        if occupied and not force:
            raise AlreadyExists(root.absolute(), "scaffold root already exists")
        check_context(manifest, context)
    except ScaffoldError as exc:
        _echo_error_json(exc, as_json)
        raise ScaffoldCliError(exc) from exc

    if occupied:
        if config.settings.cli.confirm_overwrite and not yes:
            click.confirm(f"{root} exists and will be deleted. Continue?", abort=True)

    try:
        result = scaffold(root, manifest, context, overwrite=force)
    except ScaffoldError as exc:
        _echo_error_json(exc, as_json)
        raise ScaffoldCliError(exc) from exc

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return
    click.echo(f"Scaffolded {len(result.created)} entries into {result.root}")
    for relative in result.relative_paths:
        click.echo(f"  created: {relative}")


def _echo_error_json(error: ScaffoldError, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(error.to_dict(), indent=2))


@main.command("validate")
@manifest_options
def validate(
    manifest_path: Path | None,
    template_dir: Path | None,
    variables: tuple[str, ...],
    vars_file: Path | None,
) -> None:
    """Check manifest paths and variable coverage without writing anything."""
    manifest, context = _load_inputs(manifest_path, template_dir, variables, vars_file)
    try:
        validate_entries(manifest.entries)
    except ScaffoldError as exc:
        raise ScaffoldCliError(exc) from exc

    referenced = manifest_variables(manifest)
    click.echo(f"Manifest: {manifest.name or '(unnamed)'}")
    click.echo(f"  entries: {len(manifest.entries)}")
    click.echo(f"  directories: {len(manifest.directories)}")
    click.echo(f"  files: {len(manifest.files)}")
    click.echo(f"  variables: {', '.join(referenced) if referenced else '(none)'}")

    missing = missing_variables(manifest, context)
    if missing:
        click.echo(f"  missing: {', '.join(missing)}")
        try:
            check_context(manifest, context)
        except ScaffoldError as exc:
            raise ScaffoldCliError(exc) from exc
    click.echo("Manifest validation passed.")


@main.command("plan")
@manifest_options
def plan(
    manifest_path: Path | None,
    template_dir: Path | None,
    variables: tuple[str, ...],
    vars_file: Path | None,
) -> None:
    """List what a scaffold run would write, with content hashes."""
    manifest, context = _load_inputs(manifest_path, template_dir, variables, vars_file)
    try:
        planned = plan_tree(manifest, context)
    except ScaffoldError as exc:
        raise ScaffoldCliError(exc) from exc

    for relative, digest in planned.items():
        if digest is None:
            click.echo(f"dir   {relative}/")
        else:
            click.echo(f"file  {relative}  {digest}")


@main.command("verify")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@manifest_options
def verify(
    root: Path,
    manifest_path: Path | None,
    template_dir: Path | None,
    variables: tuple[str, ...],
    vars_file: Path | None,
) -> None:
    """Compare ROOT with a fresh rendering of the manifest."""
    manifest, context = _load_inputs(manifest_path, template_dir, variables, vars_file)
    try:
        diff = diff_tree(root, manifest, context)
    except ScaffoldError as exc:
        raise ScaffoldCliError(exc) from exc

    if diff.clean:
        click.echo(f"No drift. Fingerprint: {tree_fingerprint(root)}")
        return
    for change in diff.changes:
        click.echo(change)
    raise click.ClickException(f"{len(diff.changes)} difference(s) from the manifest.")


@main.group("manifest")
def manifest_group() -> None:
    """Manifest authoring commands."""


@manifest_group.command("from-dir")
@click.argument(
    "template_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Manifest file to write.",
)
@click.option("--name", type=str, help="Manifest name. Defaults to the directory name.")
def manifest_from_dir(template_dir: Path, output: Path, name: str | None) -> None:
    """Capture TEMPLATE_DIR as a manifest with inline bodies."""
    try:
        manifest = manifest_from_directory(template_dir, name=name)
        validate_entries(manifest.entries)
        save_manifest(manifest, output)
    except ScaffoldError as exc:
        raise ScaffoldCliError(exc) from exc
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Wrote manifest with {len(manifest.entries)} entries to {output}")
