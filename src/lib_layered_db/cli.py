"""CLI adapter for ``lib_layered_db`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check data files and inspect overlay resolution without writing
Python: resolve the locations of a dataset, verify a single file's header, or
run the full load loop and report per-file entry counts.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling and log output.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_locations` – prints the resolved base/overlay paths.
* :func:`cli_verify` – loads one file and checks its header.
* :func:`cli_scan` – runs :meth:`DatasetLoader.parse` for a dataset.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The outermost layer: it only talks to the composition root and the settings
adapter. ``lib_cli_exit_tools`` centralises exit code handling.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.path_resolvers.default import DefaultLocationResolver
from .adapters.settings.default import settings_from_env, settings_from_file
from .application.fields import as_string, as_uint16
from .core import DatasetLoader
from .domain.definition import DatasetDefinition, LocationSettings, Placement
from .observability import get_logger

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

PLACEMENT_CHOICES: Final[tuple[str, ...]] = tuple(item.value for item in Placement)
LOG_LEVEL_CHOICES: Final[tuple[str, ...]] = ("debug", "info", "warning", "error", "critical")


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_layered_db")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _location_options(func):
    """Attach the shared path settings options to a command."""

    options = [
        click.option(
            "--settings",
            "settings_file",
            type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
            default=None,
            help="TOML file with a [paths] table (environment still overrides it)",
        ),
        click.option("--data-root", default=None, help="Directory holding plain and split datasets"),
        click.option("--config-root", default=None, help="Directory holding configuration datasets"),
        click.option("--import-folder", default=None, help="Overlay folder name below the data root"),
        click.option("--split-subpath", default=None, help="Variant prefix for split datasets (e.g. re/)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _definition_options(func):
    """Attach the dataset identity options to a command."""

    options = [
        click.option("--type", "dataset_type", required=True, help="Expected header Type"),
        click.option("--version", "version", type=click.IntRange(0, 65535), required=True, help="Current version"),
        click.option(
            "--minimum-version",
            type=click.IntRange(0, 65535),
            default=None,
            help="Oldest accepted version (defaults to --version)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(
    help="Versioned layered data file loader",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_layered_db",
    message="lib_layered_db version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    default=None,
    help="Print diagnostics at or above this level to stderr",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, log_level: Optional[str]) -> None:
    """Root command configuring traceback handling and diagnostics output.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and, with
        ``--log-level``, attaches a stderr handler to the package logger for the
        duration of the command.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    if log_level:
        _attach_log_handler(ctx, log_level)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_layered_db")
    except metadata.PackageNotFoundError:
        click.echo("lib_layered_db (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_layered_db')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("locations", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.option(
    "--placement",
    type=click.Choice(PLACEMENT_CHOICES, case_sensitive=False),
    default=Placement.PLAIN.value,
    show_default=True,
    help="Directory convention of the dataset",
)
@_location_options
def cli_locations(
    name: str,
    placement: str,
    settings_file: Optional[Path],
    data_root: Optional[str],
    config_root: Optional[str],
    import_folder: Optional[str],
    split_subpath: Optional[str],
) -> None:
    """Print the base and overlay paths of dataset *name* as a JSON array.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["locations", "item_db.yml", "--data-root", "db"], env={})
    >>> json.loads(result.output)[0].replace("\\\\", "/")
    'db/item_db.yml'
    """

    settings = _settings(settings_file, data_root, config_root, import_folder, split_subpath)
    paths = DefaultLocationResolver(settings).resolve(name, Placement(placement.lower()))
    click.echo(json.dumps(paths, indent=2))


@cli.command("verify", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument(
    "path",
    type=click.Path(path_type=Path, file_okay=True, dir_okay=False),
)
@_definition_options
@click.pass_context
def cli_verify(
    ctx: click.Context,
    path: Path,
    dataset_type: str,
    version: int,
    minimum_version: Optional[int],
) -> None:
    """Load a single data file, check its header, and count its body entries.

    Prints ``{"path", "type", "version", "entries"}`` as JSON on success and
    exits with status 1 when the file cannot be loaded or is incompatible.
    """

    loader = DatasetLoader(_definition(dataset_type, version, minimum_version))
    if not loader.load(str(path)) or loader.root is None:
        click.echo(f"{path}: not a loadable {dataset_type} file (see diagnostics)", err=True)
        ctx.exit(1)
    header = loader.root.root.get("Header")
    body = loader.root.root.get("Body")
    payload = {
        "path": str(path),
        "type": as_string(header, "Type").value,
        "version": as_uint16(header, "Version").value,
        "entries": sum(1 for node in body if node.defined and not node.null),
    }
    click.echo(json.dumps(payload, indent=2))


@cli.command("scan", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.option(
    "--placement",
    type=click.Choice(PLACEMENT_CHOICES, case_sensitive=False),
    default=Placement.PLAIN.value,
    show_default=True,
    help="Directory convention of the dataset",
)
@_definition_options
@_location_options
@click.pass_context
def cli_scan(
    ctx: click.Context,
    name: str,
    placement: str,
    dataset_type: str,
    version: int,
    minimum_version: Optional[int],
    settings_file: Optional[Path],
    data_root: Optional[str],
    config_root: Optional[str],
    import_folder: Optional[str],
    split_subpath: Optional[str],
) -> None:
    """Run the full load loop for dataset *name*, accepting every entry.

    Prints ``{"ok": bool, "files": {path: entries}}`` as JSON and exits with
    status 1 when any resolved file failed to load.
    """

    settings = _settings(settings_file, data_root, config_root, import_folder, split_subpath)
    loader = DatasetLoader(
        _definition(dataset_type, version, minimum_version),
        resolver=DefaultLocationResolver(settings),
    )
    ok = loader.parse(name, Placement(placement.lower()), lambda node, current: True)
    click.echo(json.dumps({"ok": ok, "files": loader.counts}, indent=2))
    if not ok:
        ctx.exit(1)


def _definition(dataset_type: str, version: int, minimum_version: Optional[int]) -> DatasetDefinition:
    """Build the dataset definition, surfacing invalid windows as usage errors."""

    if minimum_version is not None and minimum_version > version:
        raise click.BadParameter(
            f"must not exceed --version ({version})",
            param_hint="--minimum-version",
        )
    if minimum_version is None:
        return DatasetDefinition(dataset_type, version)
    return DatasetDefinition(dataset_type, version, minimum_version)


def _settings(
    settings_file: Optional[Path],
    data_root: Optional[str],
    config_root: Optional[str],
    import_folder: Optional[str],
    split_subpath: Optional[str],
) -> LocationSettings:
    """Combine settings sources: file or environment first, then CLI overrides."""

    base = settings_from_file(settings_file) if settings_file is not None else settings_from_env()
    overrides = {
        key: value
        for key, value in (
            ("data_root", data_root),
            ("config_root", config_root),
            ("import_folder", import_folder),
            ("split_subpath", split_subpath),
        )
        if value is not None
    }
    return dataclasses.replace(base, **overrides) if overrides else base


def _attach_log_handler(ctx: click.Context, level_name: str) -> None:
    """Stream package diagnostics to stderr until the command finishes."""

    logger = get_logger()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(level_name.upper())

    def _detach() -> None:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)

    ctx.call_on_close(_detach)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_layered_db",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
