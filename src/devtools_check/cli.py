from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import click

from devtools_check.catalog import CatalogError, load_catalog, select_categories
from devtools_check.checks.checker import ToolAvailabilityChecker
from devtools_check.config import ConfigError, get_settings
from devtools_check.report import format_report_json, format_report_text, write_report
from devtools_check.runner import run_checks
from devtools_check.utils.log import logger, set_log_level

EXIT_MISSING = 1
EXIT_FAULT = 2


def _fail(message: str) -> NoReturn:
    click.echo(f"error: {message}", err=True)
    raise SystemExit(EXIT_FAULT)


@click.command(name="devtools-check")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML tool catalog (default: DEVTOOLS_CATALOG or the bundled catalog).",
)
@click.option(
    "--category",
    "categories",
    multiple=True,
    help="Only check this category (repeatable, case-insensitive).",
)
@click.option("--jobs", type=click.IntRange(min=1), default=None, help="Parallel probes.")
@click.option(
    "--timeout",
    "timeout_s",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-probe timeout in seconds.",
)
@click.option("--json", "json_flag", is_flag=True, default=False, help="Print JSON instead of text.")
@click.option(
    "--write-report",
    "write_report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the report to this path (plus PATH.json with --json).",
)
@click.option("--strict", is_flag=True, default=False, help="Exit 1 if any tool is missing.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
)
@click.option("--list", "list_only", is_flag=True, default=False, help="List the catalog without probing.")
def cli(
    catalog_path: Path | None,
    categories: tuple[str, ...],
    jobs: int | None,
    timeout_s: float | None,
    json_flag: bool,
    write_report_path: Path | None,
    strict: bool,
    log_level: str | None,
    list_only: bool,
) -> None:
    """
    Check which developer tools are installed on this machine.
    """
    try:
        s = get_settings()
    except (ConfigError, ValueError) as ex:
        _fail(str(ex))
    if log_level:
        set_log_level(log_level)

    try:
        catalog = load_catalog(catalog_path or s.catalog_path)
        catalog = select_categories(catalog, categories)
    except CatalogError as ex:
        _fail(str(ex))

    if list_only:
        for category in catalog.categories:
            click.echo(f"{category.name}:")
            for tool in category.tools:
                probes = ", ".join(r.describe() for r in tool.alternatives)
                click.echo(f"  {tool.name}  [{probes}]")
        return

    checker = ToolAvailabilityChecker(timeout_s=timeout_s or s.probe_timeout_s)
    run = run_checks(catalog, checker, jobs=jobs or s.jobs)
    hint = s.install_hint or catalog.install_hint

    text = format_report_text(run, install_hint=hint)
    json_data = format_report_json(run, install_hint=hint) if json_flag else None
    if json_data is not None:
        click.echo(json.dumps(json_data, indent=2, sort_keys=True))
    else:
        click.echo(text, nl=False)

    if write_report_path is not None:
        try:
            write_report(write_report_path, text=text, json_data=json_data)
        except OSError as ex:
            _fail(f"cannot write report {write_report_path}: {ex}")
        logger.info("devtools_report_written", path=str(write_report_path))

    if strict and run.summary().missing:
        raise SystemExit(EXIT_MISSING)
